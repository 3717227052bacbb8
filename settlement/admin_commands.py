"""Admin commands for testing and game management."""

import logging
import os
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from .timeutils import now_ms
from .view import GameView

logger = logging.getLogger(__name__)

OWNER_ONLY = "❌ This command is restricted to bot owners."


class AdminCommands(commands.Cog):
    """Admin-only commands for testing and management."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.owner_id = int(os.getenv('BOT_OWNER_ID') or 0)

    def is_owner(self, user_id: int) -> bool:
        """Check if user is the bot owner or the application owner."""
        if self.owner_id and user_id == self.owner_id:
            return True
        application = getattr(self.bot, "application", None)
        owner = getattr(application, "owner", None)
        return owner is not None and user_id == owner.id

    @property
    def game(self):
        return self.bot.get_cog("SettlementCommands")

    def target_key(self, interaction: discord.Interaction, target: Optional[discord.Member]) -> str:
        guild_id = str(interaction.guild_id) if interaction.guild_id else "DM"
        user_id = target.id if target else interaction.user.id
        return f"{guild_id}:{user_id}"

    @app_commands.command(name="admin_unlimited", description="[ADMIN] Toggle unlimited resources")
    @app_commands.describe(enabled="Turn unlimited resources on or off", player="Whose settlement (defaults to you)")
    async def unlimited(self, interaction: discord.Interaction, enabled: bool,
                        player: Optional[discord.Member] = None):
        if not self.is_owner(interaction.user.id):
            await interaction.response.send_message(OWNER_ONLY, ephemeral=True)
            return

        key = self.target_key(interaction, player)
        async with self.game.lock_for(key):
            logic = await self.game.get_session(key)
            if logic is None:
                await interaction.response.send_message(
                    embed=GameView.format_error("That player has no settlement."), ephemeral=True)
                return
            logic.set_unlimited(enabled)
            logic.add_log(f"Unlimited resources {'enabled' if enabled else 'disabled'}.", "system", now_ms())
            await self.game.save_session(key)

        logger.info(f"{interaction.user.id} set unlimited resources to {enabled} for {key}")
        state = "enabled" if enabled else "disabled"
        await interaction.response.send_message(
            embed=GameView.format_success(f"Unlimited resources {state}."), ephemeral=True)

    @app_commands.command(name="admin_reset", description="[ADMIN] Delete a settlement")
    @app_commands.describe(player="Whose settlement (defaults to you)")
    async def reset(self, interaction: discord.Interaction, player: Optional[discord.Member] = None):
        if not self.is_owner(interaction.user.id):
            await interaction.response.send_message(OWNER_ONLY, ephemeral=True)
            return

        key = self.target_key(interaction, player)
        await self.game.drop_session(key)
        logger.info(f"{interaction.user.id} reset settlement {key}")

        embed = discord.Embed(
            title="🔄 Settlement Reset",
            description="The settlement has been removed. Use `/found` to start a new one.",
            color=0x00ff00
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)


async def setup(bot: commands.Bot):
    """Setup function to add the admin cog to the bot."""
    await bot.add_cog(AdminCommands(bot))
