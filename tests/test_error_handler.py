import unittest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import discord
from discord import app_commands

import helpers  # noqa: F401

from error_handler import ErrorHandler, utcnow


class TestErrorHandler(unittest.TestCase):

    def setUp(self):
        self.handler = ErrorHandler(MagicMock(), owner_id=1)

    def test_cooldown_per_error_type(self):
        now = utcnow()
        self.assertTrue(self.handler.should_notify("KeyError", now))
        self.assertFalse(self.handler.should_notify("KeyError", now + timedelta(seconds=60)))
        self.assertTrue(self.handler.should_notify("ValueError", now + timedelta(seconds=60)))
        self.assertTrue(self.handler.should_notify("KeyError", now + timedelta(seconds=301)))
        self.assertEqual(self.handler.error_counts["KeyError"], 3)

    def test_user_messages(self):
        cooldown = app_commands.CommandOnCooldown(app_commands.Cooldown(1, 10.0), 4.0)
        self.assertIn("4.0 seconds", ErrorHandler.user_message(cooldown))
        self.assertIn("permission", ErrorHandler.user_message(app_commands.MissingPermissions(["manage_guild"])))
        self.assertIn("owner has been notified", ErrorHandler.user_message(RuntimeError("boom")))


class TestOwnerNotifications(unittest.IsolatedAsyncioTestCase):

    async def test_without_owner_nothing_is_sent(self):
        bot = MagicMock()
        handler = ErrorHandler(bot, owner_id=None)
        await handler.notify_owner("Title", "Description")
        bot.fetch_user.assert_not_called()

    async def test_owner_receives_embed(self):
        owner = MagicMock()
        owner.send = AsyncMock()
        bot = MagicMock()
        bot.get_user.return_value = owner
        handler = ErrorHandler(bot, owner_id=7)
        await handler.notify_owner("Broken", "Something broke", ValueError("bad"))
        embed = owner.send.call_args.kwargs["embed"]
        self.assertIsInstance(embed, discord.Embed)
        self.assertEqual(embed.title, "🚨 Broken")


if __name__ == '__main__':
    unittest.main()
