import os
import tempfile
import unittest
from unittest.mock import patch

from helpers import make_state

from settlement.catalog import Catalog
from settlement.storage import GameStorage


class TestGameStorage(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.storage = GameStorage(os.path.join(self.tmp.name, "test.db"))
        await self.storage.initialize()

    async def asyncTearDown(self):
        self.tmp.cleanup()

    async def test_save_and_load(self):
        state = make_state()
        state.resources["gold"] = 42
        await self.storage.save_game("alpha", state)
        loaded = await self.storage.load_game("alpha")
        self.assertEqual(loaded.to_dict(), state.to_dict())
        self.assertIsNone(await self.storage.load_game("missing"))

    async def test_save_replaces_existing(self):
        state = make_state()
        await self.storage.save_game("alpha", state)
        state.resources["wood"] = 1
        await self.storage.save_game("alpha", state)
        self.assertEqual((await self.storage.load_game("alpha")).resources["wood"], 1)
        self.assertEqual(await self.storage.list_saves(), ["alpha"])

    async def test_list_saves_newest_first(self):
        with patch("settlement.storage.now_ms", side_effect=[100, 200]):
            await self.storage.save_game("old", make_state())
            await self.storage.save_game("new", make_state())
        self.assertEqual(await self.storage.list_saves(), ["new", "old"])

    async def test_delete_save(self):
        await self.storage.save_game("alpha", make_state())
        await self.storage.delete_save("alpha")
        self.assertEqual(await self.storage.list_saves(), [])

    async def test_load_catalog_seeds_defaults_once(self):
        catalog = await self.storage.load_catalog()
        self.assertEqual(catalog.to_entries(), Catalog.default().to_entries())
        self.assertEqual(len(await self.storage.get_catalog_entries("age")), 4)

        await self.storage.save_catalog_entry("age", {"id": "Age of Legends", "name": "Age of Legends",
                                                      "description": "Myth made real.", "order": 9})
        reloaded = await self.storage.load_catalog()
        self.assertEqual(reloaded.next_age("Imperial Age").name, "Age of Legends")

    async def test_unknown_catalog_kind(self):
        with self.assertRaises(ValueError):
            await self.storage.save_catalog_entry("spell", {"id": "fireball"})

    async def test_state_values(self):
        self.assertIsNone(await self.storage.get_state("greeting"))
        await self.storage.set_state("greeting", "hello")
        await self.storage.set_state("greeting", "hi")
        self.assertEqual(await self.storage.get_state("greeting"), "hi")


if __name__ == '__main__':
    unittest.main()
