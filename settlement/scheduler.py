"""Background tick loop that keeps every live settlement moving."""

import logging

import discord
from discord.ext import commands, tasks

from .config import SAVE_INTERVAL_TICKS, TICK_SECONDS
from .timeutils import now_ms
from .view import GameView

logger = logging.getLogger(__name__)


class TickScheduler:
    """Ticks every loaded session and saves those that changed."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.ticks = 0

        self.tick_loop.start()

    def cog_unload(self):
        """Clean shutdown of the scheduler."""
        self.tick_loop.cancel()

    @tasks.loop(seconds=TICK_SECONDS)
    async def tick_loop(self):
        game = self.bot.get_cog("SettlementCommands")
        if game is None:
            return
        self.ticks += 1
        periodic_save = self.ticks % SAVE_INTERVAL_TICKS == 0

        for key in list(game.sessions):
            try:
                await self.tick_session(game, key, periodic_save)
            except Exception as e:
                logger.error(f"Error ticking settlement {key}: {e}", exc_info=True)

    async def tick_session(self, game, key: str, periodic_save: bool):
        """Advance one settlement and announce a freshly raised event."""
        async with game.lock_for(key):
            logic = game.sessions.get(key)
            if logic is None:
                return
            had_event = logic.state.current_event is not None
            resolved = logic.tick(now_ms())
            new_event = not had_event and logic.state.current_event is not None
            if resolved or new_event or periodic_save:
                await game.save_session(key)

        if new_event:
            await self.send_event_notice(key, GameView(logic).format_event(logic.state.current_event))

    async def send_event_notice(self, key: str, embed: discord.Embed):
        """DM the settlement's owner that an event needs a decision."""
        user_id = int(key.rsplit(":", 1)[1])
        try:
            user = self.bot.get_user(user_id) or await self.bot.fetch_user(user_id)
            await user.send(embed=embed)
            logger.debug(f"Sent event notice to {user_id}")
        except discord.Forbidden:
            logger.warning(f"Cannot send DM to user {user_id} - DMs disabled")
        except discord.HTTPException as e:
            logger.error(f"Error sending event notice to {user_id}: {e}")

    @tick_loop.before_loop
    async def before_tick_loop(self):
        """Wait for bot to be ready before ticking."""
        await self.bot.wait_until_ready()
        logger.info("Settlement tick loop initialized")


async def setup(bot: commands.Bot):
    """Setup function to add the scheduler to the bot."""
    scheduler = TickScheduler(bot)
    # Store reference so it doesn't get garbage collected
    bot.tick_scheduler = scheduler
