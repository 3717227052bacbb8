"""Predefined game content used to seed the catalogs."""

from typing import Any, Dict, List

AGES = [
    {"name": "Nomadic Age", "description": "A scattered tribe, learning to survive."},
    {"name": "Feudal Age", "description": "Society organizes under lords and vassals, unlocking new military and economic structures."},
    {"name": "Castle Age", "description": "Powerful fortifications and advanced siege weaponry mark this new era of warfare and defense."},
    {"name": "Imperial Age", "description": "Your civilization becomes a true empire, with unparalleled economic and military might."},
]

BUILDINGS = [
    {"id": "houses", "name": "House", "description": "Increases population capacity by 5.",
     "cost": {"wood": 50}, "build_time": 15, "hp": 550, "unlocked_in_age": "Nomadic Age",
     "population_capacity": 5},
    {"id": "barracks", "name": "Barracks", "description": "Allows training of Swordsmen.",
     "cost": {"wood": 150, "stone": 50}, "build_time": 60, "hp": 1200, "unlocked_in_age": "Nomadic Age",
     "is_unique": True, "can_train_units": True},
    {"id": "archeryRange", "name": "Archery Range", "description": "Allows training of Archers.",
     "cost": {"wood": 175}, "build_time": 60, "hp": 1200, "unlocked_in_age": "Feudal Age",
     "is_unique": True, "can_train_units": True, "required_building_id": "barracks"},
    {"id": "stable", "name": "Stables", "description": "Allows training of Knights.",
     "cost": {"wood": 175, "gold": 75}, "build_time": 75, "hp": 1200, "unlocked_in_age": "Feudal Age",
     "is_unique": True, "can_train_units": True, "required_building_id": "barracks"},
    {"id": "siegeWorkshop", "name": "Siege Workshop", "description": "Constructs powerful Catapults.",
     "cost": {"wood": 200, "gold": 150}, "build_time": 90, "hp": 2100, "unlocked_in_age": "Castle Age",
     "is_unique": True, "can_train_units": True, "required_building_id": "blacksmith"},
    {"id": "blacksmith", "name": "Blacksmith", "description": "Researches infantry and cavalry upgrades.",
     "cost": {"wood": 100, "gold": 100}, "build_time": 45, "hp": 2100, "unlocked_in_age": "Nomadic Age",
     "is_unique": True},
    {"id": "watchTower", "name": "Watch Tower", "description": "Provides defense against raids.",
     "cost": {"stone": 125}, "build_time": 45, "hp": 1500, "unlocked_in_age": "Nomadic Age",
     "is_unique": True,
     "upgrades_to": [{"target": "guardTower", "cost": {"stone": 150, "gold": 50}, "time": 40,
                      "research_required": "scale_mail_armor"}]},
    {"id": "guardTower", "name": "Guard Tower", "description": "A reinforced tower with a wider watch.",
     "cost": {"stone": 275, "gold": 50}, "build_time": 85, "hp": 2400, "unlocked_in_age": "Feudal Age",
     "is_unique": True, "is_upgrade_only": True},
    {"id": "townCenter", "name": "Town Center", "description": "The heart of your settlement.",
     "cost": {}, "build_time": 0, "hp": 2400, "unlocked_in_age": "Nomadic Age",
     "is_unique": True, "population_capacity": 20},
]

UNITS = [
    {"id": "swordsman", "name": "Swordsman", "description": "Basic melee infantry. Sturdy and reliable.",
     "cost": {"food": 60, "gold": 20}, "train_time": 22, "hp": 45, "required_building": "barracks"},
    {"id": "archer", "name": "Archer", "description": "Ranged unit effective against infantry.",
     "cost": {"food": 30, "wood": 40}, "train_time": 25, "hp": 30, "required_building": "archeryRange"},
    {"id": "knight", "name": "Knight", "description": "Fast and powerful cavalry, excels at raiding.",
     "cost": {"food": 60, "gold": 75}, "train_time": 30, "hp": 100, "required_building": "stable",
     "required_building_ids": ["blacksmith"]},
    {"id": "catapult", "name": "Catapult", "description": "Siege engine devastating to buildings.",
     "cost": {"wood": 150, "gold": 150}, "train_time": 45, "hp": 50, "required_building": "siegeWorkshop",
     "population_cost": 2, "required_research_ids": ["siege_engineering"]},
]

RESEARCH = [
    {"id": "loom", "name": "Loom", "tree_id": "core_economy",
     "description": "Villagers gain +15 HP and +1 armor, making them more resilient.",
     "cost": {"gold": 50}, "research_time": 25},
    {"id": "forged_tools", "name": "Forged Tools", "tree_id": "core_economy",
     "description": "Improved tools allow villagers to gather all resources 15% faster.",
     "cost": {"food": 100}, "research_time": 40, "prerequisites": ["loom"],
     "effects": [{"kind": "gather_bonus", "resource": "*", "value": 0.15}]},
    {"id": "scale_mail_armor", "name": "Scale Mail Armor", "tree_id": "core_military",
     "description": "+1 melee and +1 pierce armor for infantry.",
     "cost": {"food": 100}, "research_time": 40, "required_building_id": "blacksmith"},
    {"id": "fletching", "name": "Fletching", "tree_id": "core_military",
     "description": "+1 attack and +1 range for Archers.",
     "cost": {"food": 100, "gold": 50}, "research_time": 30, "prerequisites": ["scale_mail_armor"],
     "required_building_id": "blacksmith"},
    {"id": "conscription", "name": "Conscription", "tree_id": "core_military",
     "description": "Military units train 10% faster.",
     "cost": {"food": 150, "gold": 100}, "research_time": 45, "required_building_id": "barracks",
     "effects": [{"kind": "train_time_reduction", "value": 0.1}]},
    {"id": "siege_engineering", "name": "Siege Engineering", "tree_id": "core_military",
     "description": "Unlocks the Catapult.",
     "cost": {"wood": 200, "gold": 100}, "research_time": 50, "prerequisites": ["forged_tools"],
     "required_building_id": "blacksmith"},
]

ITEMS = [
    {"id": "scroll_of_haste", "name": "Scroll of Haste", "rarity": "Common",
     "description": "Instantly finishes 15 seconds of work on any construction project."},
    {"id": "hearty_meal", "name": "Hearty Meal", "rarity": "Common",
     "description": "Instantly provides 75 Food."},
    {"id": "builders_charm", "name": "Builder's Charm", "rarity": "Common",
     "description": "The next building you construct will have its build time reduced by 10%."},
    {"id": "blueprint_of_the_master", "name": "Blueprint of the Master", "rarity": "Epic",
     "description": "Instantly finishes 1 minute of work on any construction project."},
    {"id": "drillmasters_whistle", "name": "Drillmaster's Whistle", "rarity": "Epic",
     "description": "The next 5 military units are trained 25% faster."},
    {"id": "golden_harvest", "name": "Golden Harvest", "rarity": "Epic",
     "description": "For the next 60 seconds, all Food gathering is boosted by 50%."},
    {"id": "shard_of_the_ancients", "name": "Shard of the Ancients", "rarity": "Legendary",
     "description": "Instantly completes the construction project with the most time remaining."},
    {"id": "heart_of_the_mountain", "name": "Heart of the Mountain", "rarity": "Legendary",
     "description": "Doubles all Gold and Stone gathering for the next 2 minutes."},
    {"id": "banner_of_command", "name": "Banner of Command", "rarity": "Legendary",
     "description": "Military units train 5% faster, permanently."},
    {"id": "whisper_of_the_creator", "name": "Whisper of the Creator", "rarity": "Spiritual",
     "description": "Instantly completes every single active task (building, training, and age advancement)."},
]

PREDEFINED_EVENTS = [
    {
        "message": "A sudden downpour has made the forests damp and difficult to work in, but the fields are thriving.",
        "choices": [
            {"text": "Focus on the farms",
             "success_effects": {"rewards": [{"kind": "resource", "resource": "food", "amount": 100}],
                                 "log": "Your focus on farming yields a small surplus."}},
            {"text": "Press on with logging",
             "success_effects": {"rewards": [{"kind": "resource", "resource": "wood", "amount": -50}],
                                 "log": "Wet wood and difficult conditions lead to a loss of resources."}},
        ],
    },
    {
        "message": "Scouts have discovered a small, unguarded gold deposit in the nearby hills.",
        "choices": [
            {"text": "Mine it immediately", "success_chance": 0.8,
             "success_effects": {"rewards": [{"kind": "resource", "resource": "gold", "amount": [100, 175]}],
                                 "log": "You successfully secured the extra gold."},
             "failure_effects": {"rewards": [], "log": "The vein collapses before much is recovered.",
                                 "cost": {"food": 25}}},
            {"text": "Leave it for later",
             "success_effects": {"rewards": [], "log": "You decide not to risk sending workers so far away."}},
        ],
    },
    {
        "message": "A traveling mystic offers to bless your villagers, promising increased hardiness for a small donation.",
        "choices": [
            {"text": "Pay the mystic (50 Gold)", "cost": {"gold": 50},
             "success_effects": {"rewards": [{"kind": "item", "item_id": "hearty_meal", "count": 2}],
                                 "log": "Your villagers feel invigorated, though your treasury is lighter."}},
            {"text": "Decline the offer",
             "success_effects": {"rewards": [], "log": "You send the mystic on their way."}},
        ],
    },
    {
        "message": "A vein of poor-quality stone has been discovered in your quarry, slowing down operations.",
        "choices": [
            {"text": "A necessary setback.",
             "success_effects": {"rewards": [{"kind": "resource", "resource": "stone", "amount": -75}],
                                 "log": "You lose some stone while clearing the poor-quality vein."}},
        ],
    },
    {
        "message": "A merchant caravan offers timber in exchange for gold.",
        "choices": [
            {"text": "Strike a deal (40 Gold)", "cost": {"gold": 40}, "success_chance": 0.7,
             "success_effects": {"rewards": [{"kind": "resource", "resource": "wood", "amount": [100, 150]}],
                                 "log": "The timber arrives as promised."},
             "failure_effects": {"rewards": [], "log": "The caravan vanishes overnight with your gold."}},
            {"text": "Send them away",
             "success_effects": {"rewards": [], "log": "The caravan moves on."}},
        ],
    },
    {
        "message": "Wanderers from a ruined village ask to join your settlement.",
        "choices": [
            {"text": "Welcome them", "cost": {"food": 60},
             "success_effects": {"rewards": [{"kind": "unit", "count": 2}],
                                 "log": "The newcomers settle in and get to work."}},
            {"text": "Offer them supplies for the road", "cost": {"food": 30},
             "success_effects": {"rewards": [{"kind": "item", "item_id": "scroll_of_haste", "count": 1}],
                                 "log": "Grateful, they leave behind an old scroll."}},
        ],
    },
    {
        "message": "An old hermit claims to know where an ancient relic is buried.",
        "choices": [
            {"text": "Dig at the marked spot", "cost": {"food": 50, "wood": 25}, "success_chance": 0.35,
             "success_effects": {"rewards": [{"kind": "item", "item_id": "shard_of_the_ancients", "count": 1}],
                                 "log": "Your diggers unearth a glowing shard."},
             "failure_effects": {"rewards": [{"kind": "resource", "resource": "stone", "amount": [10, 40]}],
                                 "log": "The hole yields nothing but rubble."}},
            {"text": "Ignore the old fool",
             "success_effects": {"rewards": [], "log": "The hermit shuffles off, muttering."}},
        ],
    },
]

CIVILIZATIONS = [
    {"name": "The Sunstone Clan",
     "lore": "Masters of stonework, their cities are carved directly into mountainsides.",
     "bonus": "Stone gathering is 20% faster.",
     "unique_unit": "Granite Guard",
     "banner_url": "https://picsum.photos/seed/sunstone/512/512"},
    {"name": "The River Nomads",
     "lore": "A fluid society that follows the great rivers, their culture as rich as the fertile plains.",
     "bonus": "Food gathering is 15% faster.",
     "unique_unit": "River-Watch Rider",
     "banner_url": "https://picsum.photos/seed/riverfolk/512/512"},
    {"name": "The Ironwood Sentinels",
     "lore": "Living in deep forests, they have mastered the art of woodwork and archery.",
     "bonus": "Wood gathering is 25% faster.",
     "unique_unit": "Ironwood Archer",
     "banner_url": "https://picsum.photos/seed/ironwood/512/512"},
    {"name": "The Gilded Syndicate",
     "lore": "A civilization built on trade and wealth, their markets are the envy of the world.",
     "bonus": "Gold mining generates 10% more resources.",
     "unique_unit": "Gilded Companion",
     "banner_url": "https://picsum.photos/seed/gilded/512/512"},
]

NAME_POOLS = {
    "villager": [
        "Aldric", "Brenna", "Cedric", "Dagny", "Edwin", "Freya", "Gareth", "Hilda",
        "Ivo", "Jorunn", "Kendric", "Liesel", "Merrick", "Nessa", "Osric", "Petra",
    ],
    "soldier": [
        "Bram", "Corwin", "Duncan", "Eira", "Falk", "Gisela", "Halvard", "Ingrid",
        "Jarek", "Kaia", "Leofric", "Maren",
    ],
    "building": [
        "Oakhold", "Stonebridge", "Ashford", "Elmstead", "Highmoor", "Ravenrest",
        "Millbrook", "Thornwall", "Greywater", "Foxhollow", "Brightfield", "Copperdale",
    ],
}


def default_entries() -> Dict[str, List[Dict[str, Any]]]:
    """Catalog rows with ids and display order filled in."""
    return {
        "age": [dict(age, id=age["name"], order=i) for i, age in enumerate(AGES)],
        "building": [dict(b, order=i) for i, b in enumerate(BUILDINGS)],
        "unit": [dict(u, order=i) for i, u in enumerate(UNITS)],
        "research": [dict(r, order=i) for i, r in enumerate(RESEARCH)],
        "item": [dict(item, order=i) for i, item in enumerate(ITEMS)],
    }
