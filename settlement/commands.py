"""Discord slash commands for Settlement Saga."""

import asyncio
import logging
from typing import Dict, List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from .catalog import Catalog
from .handlers import (
    ADVANCE_AGE_ACTION, BUILD_ACTION, DEMOLISH, GATHER_ACTION, MOVE, RECALL, START_RESEARCH,
    TRAIN_UNIT_ACTION, TRAIN_VILLAGER_ACTION, UPGRADE_BUILDING_ACTION, USE_ITEM,
)
from .logic import GameLogic
from .models import ActionRequest, ActionResult
from .names import CivilizationRoster
from .storage import GameStorage
from .timeutils import now_ms
from .view import GameView

logger = logging.getLogger(__name__)

NO_SETTLEMENT = "You have not founded a settlement yet. Use `/found` to begin."
VILLAGER_CHOICE = "villager"
ROSTER_STATE_KEY = "civilization_index"


def session_key(interaction: discord.Interaction) -> str:
    """Saves are per player per guild."""
    guild_id = str(interaction.guild_id) if interaction.guild_id else "DM"
    return f"{guild_id}:{interaction.user.id}"


def _matches(current: str, *values: str) -> bool:
    current = current.lower()
    return any(current in value.lower() for value in values)


class SettlementCommands(commands.Cog):
    """Cog containing all Settlement Saga slash commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.storage = GameStorage()
        self.catalog: Optional[Catalog] = None
        self.sessions: Dict[str, GameLogic] = {}
        self.locks: Dict[str, asyncio.Lock] = {}
        self.roster = CivilizationRoster()

    async def cog_load(self):
        """Initialize the database and catalog when the cog loads."""
        await self.storage.initialize()
        self.catalog = await self.storage.load_catalog()
        index = await self.storage.get_state(ROSTER_STATE_KEY)
        if index is not None:
            self.roster.index = int(index)
        for key in await self.storage.list_saves():
            await self.get_session(key)
        logger.info(f"Restored {len(self.sessions)} settlement(s)")

    def lock_for(self, key: str) -> asyncio.Lock:
        return self.locks.setdefault(key, asyncio.Lock())

    async def get_session(self, key: str) -> Optional[GameLogic]:
        """The live session for a save, loading it on first use."""
        logic = self.sessions.get(key)
        if logic is None:
            state = await self.storage.load_game(key)
            if state is None:
                return None
            logic = GameLogic(self.catalog, state, roster=self.roster)
            self.sessions[key] = logic
        return logic

    async def save_session(self, key: str):
        await self.storage.save_game(key, self.sessions[key].state)

    async def drop_session(self, key: str):
        """Forget a settlement entirely."""
        async with self.lock_for(key):
            self.sessions.pop(key, None)
            await self.storage.delete_save(key)

    async def run_action(self, interaction: discord.Interaction, action_type: str, **payload):
        """Catch the session up, dispatch one action and report the outcome."""
        key = session_key(interaction)
        async with self.lock_for(key):
            logic = await self.get_session(key)
            if logic is None:
                result = ActionResult.rejected(NO_SETTLEMENT)
            else:
                now = now_ms()
                logic.tick(now)
                result = logic.dispatch(ActionRequest(action_type, payload), now)
                if result.success:
                    await self.save_session(key)

        embed = GameView.format_result(result)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def _show(self, interaction: discord.Interaction, render):
        key = session_key(interaction)
        async with self.lock_for(key):
            logic = await self.get_session(key)
            if logic is not None:
                logic.tick(now_ms())
        if logic is None:
            embed = GameView.format_error(NO_SETTLEMENT)
        else:
            embed = render(GameView(logic))
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="found", description="Found a new settlement")
    @app_commands.describe(restart="Abandon your current settlement and start over")
    async def found(self, interaction: discord.Interaction, restart: bool = False):
        key = session_key(interaction)
        async with self.lock_for(key):
            if await self.get_session(key) and not restart:
                embed = GameView.format_error("You already lead a settlement. Use `/found restart:True` to start over.")
                await interaction.response.send_message(embed=embed, ephemeral=True)
                return

            logic = GameLogic(self.catalog, roster=self.roster)
            now = now_ms()
            logic.new_game(now)
            await self.storage.set_state(ROSTER_STATE_KEY, str(self.roster.index))
            self.sessions[key] = logic
            await self.save_session(key)

        logger.info(f"{interaction.user.id} founded {logic.state.civilization.name} ({key})")
        await interaction.response.send_message(embed=GameView(logic).format_status(now), ephemeral=True)

    @app_commands.command(name="status", description="View your settlement")
    async def status(self, interaction: discord.Interaction):
        await self._show(interaction, lambda view: view.format_status(now_ms()))

    @app_commands.command(name="inventory", description="View your items")
    async def inventory(self, interaction: discord.Interaction):
        await self._show(interaction, lambda view: view.format_inventory())

    @app_commands.command(name="villagers", description="View your villagers and army")
    async def villagers(self, interaction: discord.Interaction):
        await self._show(interaction, lambda view: view.format_villagers())

    @app_commands.command(name="event", description="View the event awaiting your decision")
    async def event(self, interaction: discord.Interaction):
        await self._show(interaction, lambda view: view.format_event(view.logic.state.current_event))

    @app_commands.command(name="choose", description="Answer the current event")
    @app_commands.describe(choice="The number of the choice")
    async def choose(self, interaction: discord.Interaction, choice: app_commands.Range[int, 1, 10]):
        key = session_key(interaction)
        async with self.lock_for(key):
            logic = await self.get_session(key)
            if logic is None:
                result = ActionResult.rejected(NO_SETTLEMENT)
            else:
                now = now_ms()
                logic.tick(now)
                result = logic.choose(choice - 1, now)
                if result.success:
                    await self.save_session(key)
        await interaction.response.send_message(embed=GameView.format_result(result), ephemeral=True)

    @app_commands.command(name="train", description="Train villagers or military units")
    @app_commands.describe(unit="What to train", count="How many")
    async def train(self, interaction: discord.Interaction, unit: str, count: app_commands.Range[int, 1, 50] = 1):
        if unit == VILLAGER_CHOICE:
            await self.run_action(interaction, TRAIN_VILLAGER_ACTION, count=count)
        else:
            await self.run_action(interaction, TRAIN_UNIT_ACTION, unit_kind=unit, count=count)

    @app_commands.command(name="build", description="Construct a new building")
    @app_commands.describe(building="Building type", x="Map column", y="Map row",
                           villager="Villager id (defaults to the first idle villager)")
    async def build(self, interaction: discord.Interaction, building: str, x: int, y: int,
                    villager: Optional[str] = None):
        if villager is None:
            logic = await self.get_session(session_key(interaction))
            idle = [v for v in logic.state.units.villagers if not v.current_task] if logic else []
            villager = idle[0].id if idle else ""
        await self.run_action(interaction, BUILD_ACTION, building_kind=building, villager_id=villager,
                              position={"x": x, "y": y})

    @app_commands.command(name="demolish", description="Tear down a building for a partial refund")
    async def demolish(self, interaction: discord.Interaction, building: str):
        await self.run_action(interaction, DEMOLISH, building_id=building)

    @app_commands.command(name="upgrade", description="Upgrade a building")
    async def upgrade(self, interaction: discord.Interaction, building: str, target: str):
        await self.run_action(interaction, UPGRADE_BUILDING_ACTION, building_id=building, target_kind=target)

    @app_commands.command(name="research", description="Start a research")
    async def research(self, interaction: discord.Interaction, research: str):
        await self.run_action(interaction, START_RESEARCH, research_id=research)

    @app_commands.command(name="advance", description="Advance to the next age")
    async def advance(self, interaction: discord.Interaction):
        await self.run_action(interaction, ADVANCE_AGE_ACTION)

    @app_commands.command(name="gather", description="Send idle villagers to a resource node")
    @app_commands.describe(node="Resource node", villagers="How many idle villagers to send")
    async def gather(self, interaction: discord.Interaction, node: str,
                     villagers: app_commands.Range[int, 1, 50] = 1):
        logic = await self.get_session(session_key(interaction))
        idle = [v.id for v in logic.state.units.villagers if not v.current_task][:villagers] if logic else []
        await self.run_action(interaction, GATHER_ACTION, resource_node_id=node, villager_ids=idle)

    @app_commands.command(name="recall", description="Recall every villager from a resource node")
    async def recall(self, interaction: discord.Interaction, node: str):
        await self.run_action(interaction, RECALL, resource_node_id=node)

    @app_commands.command(name="move", description="Order units to a map cell")
    @app_commands.describe(units="Comma separated unit ids")
    async def move(self, interaction: discord.Interaction, units: str, x: int, y: int):
        unit_ids = [unit_id.strip() for unit_id in units.split(",") if unit_id.strip()]
        await self.run_action(interaction, MOVE, unit_ids=unit_ids, target_position={"x": x, "y": y})

    @app_commands.command(name="use", description="Use an item from your inventory")
    async def use(self, interaction: discord.Interaction, item: str):
        await self.run_action(interaction, USE_ITEM, item_id=item)

    @train.autocomplete("unit")
    async def unit_autocomplete(self, interaction: discord.Interaction, current: str) -> List[app_commands.Choice[str]]:
        choices = [app_commands.Choice(name="Villager", value=VILLAGER_CHOICE)]
        choices += [
            app_commands.Choice(name=unit.name, value=unit.id)
            for unit in self.catalog.units.values() if unit.is_active
        ]
        return [c for c in choices if _matches(current, c.name, c.value)][:25]

    @build.autocomplete("building")
    async def building_kind_autocomplete(self, interaction: discord.Interaction,
                                         current: str) -> List[app_commands.Choice[str]]:
        return [
            app_commands.Choice(name=b.name, value=b.id)
            for b in self.catalog.buildings.values()
            if b.is_active and not b.is_upgrade_only and _matches(current, b.name, b.id)
        ][:25]

    @demolish.autocomplete("building")
    @upgrade.autocomplete("building")
    async def building_autocomplete(self, interaction: discord.Interaction,
                                    current: str) -> List[app_commands.Choice[str]]:
        logic = self.sessions.get(session_key(interaction))
        if logic is None:
            return []
        choices = []
        for kind, instances in logic.state.buildings.items():
            for instance in instances:
                label = f"{instance.name} ({self.catalog.building_name(kind)})"
                if _matches(current, label):
                    choices.append(app_commands.Choice(name=label[:100], value=instance.id))
        return choices[:25]

    @upgrade.autocomplete("target")
    async def upgrade_target_autocomplete(self, interaction: discord.Interaction,
                                          current: str) -> List[app_commands.Choice[str]]:
        targets = {path.target for b in self.catalog.buildings.values() for path in b.upgrades_to}
        return [
            app_commands.Choice(name=self.catalog.building_name(t), value=t)
            for t in sorted(targets) if _matches(current, t, self.catalog.building_name(t))
        ][:25]

    @research.autocomplete("research")
    async def research_autocomplete(self, interaction: discord.Interaction,
                                    current: str) -> List[app_commands.Choice[str]]:
        return [
            app_commands.Choice(name=r.name, value=r.id)
            for r in self.catalog.research.values() if r.is_active and _matches(current, r.name, r.id)
        ][:25]

    @gather.autocomplete("node")
    @recall.autocomplete("node")
    async def node_autocomplete(self, interaction: discord.Interaction,
                                current: str) -> List[app_commands.Choice[str]]:
        logic = self.sessions.get(session_key(interaction))
        if logic is None:
            return []
        return [
            app_commands.Choice(name=f"{n.kind} at ({n.position.x}, {n.position.y}), {int(n.amount)} left", value=n.id)
            for n in logic.state.resource_nodes if _matches(current, n.kind, n.id)
        ][:25]

    @use.autocomplete("item")
    async def item_autocomplete(self, interaction: discord.Interaction,
                                current: str) -> List[app_commands.Choice[str]]:
        logic = self.sessions.get(session_key(interaction))
        if logic is None:
            return []
        return [
            app_commands.Choice(name=item.name, value=item.id)
            for item in logic.state.inventory if _matches(current, item.name)
        ][:25]


async def setup(bot: commands.Bot):
    """Setup function to add the cog to the bot."""
    await bot.add_cog(SettlementCommands(bot))
