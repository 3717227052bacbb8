import os
import tempfile
import unittest
from unittest.mock import AsyncMock, MagicMock

import helpers  # noqa: F401

from settlement.commands import SettlementCommands
from settlement.storage import GameStorage


def make_interaction(user_id, guild_id=1):
    interaction = MagicMock()
    interaction.guild_id = guild_id
    interaction.user.id = user_id
    interaction.response.send_message = AsyncMock()
    return interaction


class TestFoundCommand(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmp.name, "test.db")
        self.cog = await self.load_cog()

    async def asyncTearDown(self):
        self.tmp.cleanup()

    async def load_cog(self):
        cog = SettlementCommands(MagicMock())
        cog.storage = GameStorage(self.db_path)
        await cog.cog_load()
        return cog

    async def found(self, cog, user_id):
        await cog.found.callback(cog, make_interaction(user_id))
        return cog.sessions[f"1:{user_id}"].state.civilization.name

    async def test_each_settlement_gets_the_next_civilization(self):
        names = [await self.found(self.cog, user_id) for user_id in (10, 11, 12)]
        self.assertEqual(len(set(names)), 3)

    async def test_rotation_survives_restart(self):
        first = await self.found(self.cog, 10)
        restarted = await self.load_cog()
        self.assertEqual(len(restarted.sessions), 1)
        second = await self.found(restarted, 11)
        self.assertNotEqual(first, second)
        self.assertEqual(restarted.roster.index, 2)

    async def test_found_twice_needs_restart(self):
        await self.found(self.cog, 10)
        interaction = make_interaction(10)
        await self.cog.found.callback(self.cog, interaction)
        embed = interaction.response.send_message.call_args.kwargs["embed"]
        self.assertIn("already lead a settlement", embed.description)


if __name__ == '__main__':
    unittest.main()
