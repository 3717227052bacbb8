"""Game configuration constants and settings."""

import os

STARTING_RESOURCES = {"food": 200, "wood": 150, "gold": 50, "stone": 100}
STARTING_VILLAGERS = 3
UNLIMITED_RESOURCE_AMOUNT = 99999

# Villagers are trained at the Town Center
VILLAGER_COST = {"food": 50}
VILLAGER_TRAIN_SECONDS = 15

AGE_ADVANCE_COST = {"food": 500, "gold": 200}
AGE_ADVANCE_SECONDS = 60
FINAL_AGE_NAME = "Age of Legends"

TOWN_CENTER = "townCenter"
DEMOLITION_REFUND_RATE = 0.5

# Resource units per second for one villager
GATHER_RATES = {
    "food": 10,
    "wood": 8,
    "gold": 5,
    "stone": 6,
}
DEFAULT_GATHER_RATE = 5
GATHER_DURATION_MS = 999_999_999

MAP_WIDTH = 25
MAP_HEIGHT = 18
NODE_COUNT_RANGE = (20, 29)
NODE_AMOUNT_RANGE = (500, 2500)

MAX_LOG_ENTRIES = 50

# Seconds between random events
EVENT_INTERVAL_RANGE = (300, 900)

RARITY_ORDER = ["Common", "Epic", "Legendary", "Spiritual"]

TICK_SECONDS = 1.0
# Idle sessions are saved every this many ticks
SAVE_INTERVAL_TICKS = 30
TIMEZONE = os.getenv("TIMEZONE", "America/Los_Angeles")
DATABASE_PATH = "settlement.db"
