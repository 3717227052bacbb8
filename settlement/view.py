"""View formatting for Settlement Saga displays."""

from typing import Optional

import discord

from .config import RARITY_ORDER
from .items import item_usability
from .logic import GameLogic
from .models import ActionResult, GameEvent
from .timeutils import format_clock, format_duration, ms_until

RESOURCE_ICONS = {"food": "🌾", "wood": "🪵", "gold": "🪙", "stone": "🪨"}
TASK_LABELS = {
    "build": "🔨 Construction",
    "train_villager": "👷 Villager training",
    "train_military": "⚔️ Military training",
    "research": "📜 Research",
    "advance_age": "🏰 Age advancement",
    "upgrade_building": "⬆️ Upgrade",
    "gather": "🧺 Gathering",
}


def progress_bar(fraction: float, width: int = 10) -> str:
    filled = int(round(fraction * width))
    return "▰" * filled + "▱" * (width - filled)


class GameView:
    """Handles formatting of game displays."""

    def __init__(self, logic: GameLogic):
        self.logic = logic

    def format_status(self, now: int) -> discord.Embed:
        """Resources, population, age and the task queue."""
        state = self.logic.state
        civilization = state.civilization
        embed = discord.Embed(
            title=f"🏘️ {civilization.name if civilization else 'Your Settlement'}",
            description=f"**{state.current_age}**" + (f"\n*{civilization.bonus}*" if civilization else ""),
            color=0x8b5a2b
        )

        resources = " | ".join(
            f"{RESOURCE_ICONS.get(kind, '')} {amount}" for kind, amount in state.resources.items()
        )
        if state.unlimited_resources:
            resources += "\n♾️ Unlimited resources"
        embed.add_field(name="Resources", value=resources or "None", inline=False)

        population = self.logic.population()
        pending = f" (+{population.pending} training)" if population.pending else ""
        embed.add_field(name="Population", value=f"{population.current}/{population.capacity}{pending}", inline=True)

        buildings = [
            f"{self.logic.catalog.building_name(kind)} ×{len(instances)}"
            for kind, instances in state.buildings.items() if instances
        ]
        embed.add_field(name="Buildings", value="\n".join(buildings) or "None", inline=True)

        lines = []
        for task, fraction in self.logic.task_progress(now):
            label = TASK_LABELS.get(task.kind, task.kind)
            if task.kind == "gather":
                workers = len(task.payload.get("villager_ids", []))
                lines.append(f"{label}: {workers} villager(s) at `{task.payload.get('resource_node_id')}`")
            else:
                remaining = format_duration(ms_until(task.due_at, now))
                lines.append(f"{label} {progress_bar(fraction)} {remaining}")
        embed.add_field(name="Tasks", value="\n".join(lines[:15]) or "Idle", inline=False)

        if state.game_log:
            recent = "\n".join(f"• {entry.message}" for entry in state.game_log[:5])
            embed.add_field(name="Recent Events", value=recent, inline=False)

        if state.current_event:
            embed.set_footer(text="❗ An event awaits your decision. Use /event to see it.")
        elif state.next_event_at:
            embed.set_footer(text=f"Next event expected around {format_clock(state.next_event_at)}")
        return embed

    def format_inventory(self) -> discord.Embed:
        state = self.logic.state
        embed = discord.Embed(title="🎒 Inventory", color=0x795548)
        if not state.inventory:
            embed.description = "Your inventory is empty."
            return embed

        rank = {rarity: index for index, rarity in enumerate(RARITY_ORDER)}
        items = sorted(state.inventory, key=lambda i: rank.get(i.rarity, len(rank)))
        for item in items[:25]:
            usable, reason = item_usability(item, state.active_tasks, state.active_buffs)
            status = "✅" if usable else f"⛔ {reason}"
            embed.add_field(
                name=f"{item.name} ({item.rarity})",
                value=f"{item.description}\n`{item.id}` {status}",
                inline=False
            )
        return embed

    def format_villagers(self) -> discord.Embed:
        units = self.logic.state.units
        embed = discord.Embed(title="👥 Your People", color=0x4caf50)
        villagers = [
            f"`{v.id}` {v.name}: {'working' if v.current_task else 'idle'}" for v in units.villagers
        ]
        embed.add_field(name=f"Villagers ({len(units.villagers)})", value="\n".join(villagers[:20]) or "None",
                        inline=False)
        military = []
        for unit in units.military:
            config = self.logic.catalog.unit(unit.unit_kind)
            military.append(f"{unit.name} ({config.name if config else unit.unit_kind})")
        embed.add_field(name=f"Military ({len(units.military)})", value="\n".join(military[:20]) or "None",
                        inline=False)
        return embed

    def format_event(self, event: Optional[GameEvent]) -> discord.Embed:
        if event is None:
            return discord.Embed(
                title="🌄 All Quiet",
                description="No event needs your attention right now.",
                color=0x607d8b
            )
        embed = discord.Embed(title="❗ An Event Unfolds", description=event.message, color=0xffc107)
        for index, choice in enumerate(event.choices, start=1):
            details = []
            if choice.cost:
                details.append("Cost: " + ", ".join(f"{amount} {kind}" for kind, amount in choice.cost.items()))
            if choice.success_chance is not None:
                details.append(f"Chance: {round(choice.success_chance * 100)}%")
            embed.add_field(name=f"{index}. {choice.text}", value=" | ".join(details) or "No cost", inline=False)
        embed.set_footer(text="Use /choose with the number of your choice.")
        return embed

    @staticmethod
    def format_result(result: ActionResult) -> discord.Embed:
        """An accepted action, or its rejection."""
        if result.error:
            return GameView.format_error(result.error)
        message = result.activity_status or (result.log[0] if result.log else "Done.")
        embed = GameView.format_success(message)
        if result.resource_deltas:
            changes = ", ".join(f"{amount:+d} {kind}" for kind, amount in result.resource_deltas.items())
            embed.add_field(name="Resources", value=changes, inline=False)
        return embed

    @staticmethod
    def format_error(message: str) -> discord.Embed:
        """Format an error message."""
        return discord.Embed(title="❌ Error", description=message, color=0xff0000)

    @staticmethod
    def format_success(message: str) -> discord.Embed:
        """Format a success message."""
        return discord.Embed(title="✅ Success", description=message, color=0x00ff00)
