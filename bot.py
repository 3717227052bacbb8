"""Main entry point for the Settlement Saga Discord bot."""

import os
import sys
import asyncio
import logging
from pathlib import Path
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands
from dotenv import load_dotenv

from error_handler import ErrorHandler

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('settlement.log')
    ]
)
logger = logging.getLogger(__name__)

EXTENSIONS = [
    # (module, required)
    ('settlement.commands', True),
    ('settlement.admin_commands', False),
    ('settlement.scheduler', False),
]


def load_or_prompt_env() -> str:
    """Load environment variables or prompt for the token if missing."""
    load_dotenv()

    token = os.getenv('DISCORD_TOKEN')
    if not token:
        logger.warning("DISCORD_TOKEN not found in .env file")
        token = input("Please enter your Discord bot token: ").strip()

        if not token:
            logger.error("No token provided. Exiting.")
            sys.exit(1)

        env_path = Path('.env')
        with env_path.open('a') as f:
            f.write(f"\nDISCORD_TOKEN={token}\n")
        logger.info("Token saved to .env file")

    return token


def owner_id_from_env() -> Optional[int]:
    """The Discord user that receives error reports, if configured."""
    value = os.getenv('BOT_OWNER_ID')
    if not value:
        logger.warning("BOT_OWNER_ID is not set, owner notifications are disabled")
        return None
    try:
        return int(value)
    except ValueError:
        logger.error(f"BOT_OWNER_ID must be a numeric user id, got {value!r}")
        return None


class SettlementBot(commands.Bot):
    """The main Settlement Saga bot class."""

    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = False  # slash commands only

        super().__init__(
            command_prefix='!',  # Unused but required
            intents=intents,
            description="A Discord bot for growing a settlement through the ages"
        )

        self.error_handler = ErrorHandler(self, owner_id_from_env())
        self.tree.on_error = self.on_app_command_error

    async def setup_hook(self):
        """Load the game extensions and sync slash commands."""
        logger.info("Setting up Settlement Saga bot...")

        for extension, required in EXTENSIONS:
            try:
                await self.load_extension(extension)
                logger.info(f"Loaded {extension}")
            except Exception as e:
                await self.error_handler.notify_owner(f"Failed to load {extension}", str(e), e)
                logger.error(f"Failed to load {extension}: {e}")
                if required:
                    raise

        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} command(s)")
        except discord.HTTPException as e:
            await self.error_handler.notify_owner("Failed to sync commands", str(e), e)
            logger.error(f"Failed to sync commands: {e}")

    async def on_ready(self):
        logger.info(f"Settlement Saga bot is ready! Logged in as {self.user}")
        logger.info(f"Bot is in {len(self.guilds)} guild(s)")

        try:
            activity = discord.Game(name="Settlement Saga | /found")
            await self.change_presence(activity=activity)
            await self.error_handler.send_startup_notification()
        except discord.HTTPException as e:
            logger.error(f"Error in on_ready: {e}")

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        # app command failures arrive wrapped in CommandInvokeError
        if isinstance(error, app_commands.CommandInvokeError):
            error = error.original
        await self.error_handler.handle_interaction_error(interaction, error)

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors."""
        exc_type, exc_value, exc_traceback = sys.exc_info()
        logger.error(f"Bot error in event {event}", exc_info=True)
        if exc_value:
            context = {"event": event, "args": str(args)[:500]}
            await self.error_handler.notify_owner(f"Bot Error in {event}", str(context), exc_value)

    async def close(self):
        """Clean shutdown."""
        logger.info("Shutting down Settlement Saga bot...")
        await self.error_handler.notify_owner("Bot Shutdown", "Settlement Saga bot is shutting down normally")
        await super().close()


async def main():
    """Main function to run the bot."""
    token = load_or_prompt_env()
    bot = SettlementBot()
    try:
        await bot.start(token)
    except Exception as e:
        logger.error(f"Bot crashed: {e}", exc_info=True)
        await bot.error_handler.notify_owner("Bot Crashed", "Fatal error while running", e)
        raise
    finally:
        if not bot.is_closed():
            await bot.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
