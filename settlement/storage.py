"""Database storage layer for Settlement Saga."""

import json
import logging
from typing import Any, Dict, List, Optional

import aiosqlite

from .catalog import CATALOG_KINDS, Catalog
from .config import DATABASE_PATH
from .content import PREDEFINED_EVENTS, default_entries
from .models import GameState
from .timeutils import now_ms

logger = logging.getLogger(__name__)


class GameStorage:
    """Handles all database operations for the game."""

    def __init__(self, db_path: str = DATABASE_PATH):
        self.db_path = db_path

    async def initialize(self):
        """Initialize the database with required tables."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS saves (
                    name TEXT PRIMARY KEY,
                    updated_at INTEGER NOT NULL,
                    snapshot TEXT NOT NULL
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS catalog (
                    kind TEXT NOT NULL,
                    id TEXT NOT NULL,
                    sort_order INTEGER NOT NULL DEFAULT 0,
                    payload TEXT NOT NULL,
                    PRIMARY KEY(kind, id)
                )
            """)

            await db.execute("""
                CREATE TABLE IF NOT EXISTS state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            await db.commit()

    async def save_game(self, name: str, state: GameState):
        """Write a snapshot of a settlement, replacing any earlier one."""
        snapshot = json.dumps(state.to_dict())
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO saves (name, updated_at, snapshot) VALUES (?, ?, ?)",
                (name, now_ms(), snapshot)
            )
            await db.commit()

    async def load_game(self, name: str) -> Optional[GameState]:
        """Load a saved settlement by name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT snapshot FROM saves WHERE name = ?", (name,)) as cursor:
                row = await cursor.fetchone()
                if row:
                    return GameState.from_dict(json.loads(row["snapshot"]))
                return None

    async def list_saves(self) -> List[str]:
        """Names of every save, most recently updated first."""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT name FROM saves ORDER BY updated_at DESC, name") as cursor:
                rows = await cursor.fetchall()
                return [row[0] for row in rows]

    async def delete_save(self, name: str):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM saves WHERE name = ?", (name,))
            await db.commit()

    async def save_catalog_entry(self, kind: str, entry: Dict[str, Any]):
        """Insert or replace one catalog definition."""
        if kind not in CATALOG_KINDS:
            raise ValueError(f"Unknown catalog kind: {kind}")
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO catalog (kind, id, sort_order, payload) VALUES (?, ?, ?, ?)",
                (kind, entry["id"], entry.get("order", 0), json.dumps(entry))
            )
            await db.commit()

    async def get_catalog_entries(self, kind: str) -> List[Dict[str, Any]]:
        """All definitions of one kind, in display order."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT payload FROM catalog WHERE kind = ? ORDER BY sort_order, id", (kind,)
            ) as cursor:
                rows = await cursor.fetchall()
                return [json.loads(row["payload"]) for row in rows]

    async def load_catalog(self) -> Catalog:
        """Load the catalog, seeding the default content on first run."""
        entries = {kind: await self.get_catalog_entries(kind) for kind in CATALOG_KINDS}
        if not any(entries.values()):
            logger.info("Catalog is empty, seeding default content")
            entries = default_entries()
            for kind, rows in entries.items():
                for row in rows:
                    await self.save_catalog_entry(kind, row)
        return Catalog.from_entries(entries, PREDEFINED_EVENTS)

    async def get_state(self, key: str) -> Optional[str]:
        """Get a host setting."""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT value FROM state WHERE key = ?", (key,)) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else None

    async def set_state(self, key: str, value: str):
        """Set a host setting."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO state (key, value) VALUES (?, ?)",
                (key, value)
            )
            await db.commit()
