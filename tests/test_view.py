import unittest
from unittest.mock import MagicMock, patch

from helpers import NOW, make_item, make_state

from settlement.catalog import Catalog
from settlement.commands import session_key
from settlement.logic import GameLogic
from settlement.models import ActionRequest, ActionResult
from settlement.view import GameView, progress_bar


class TestGameView(unittest.TestCase):

    def setUp(self):
        self.logic = GameLogic(Catalog.default(), make_state())
        self.view = GameView(self.logic)

    def test_progress_bar(self):
        self.assertEqual(progress_bar(0.0, width=4), "▱▱▱▱")
        self.assertEqual(progress_bar(0.5, width=4), "▰▰▱▱")
        self.assertEqual(progress_bar(1.0, width=4), "▰▰▰▰")

    def test_format_result_error(self):
        embed = GameView.format_result(ActionResult(error="Need more food."))
        self.assertEqual(embed.title, "❌ Error")
        self.assertEqual(embed.description, "Need more food.")

    def test_format_result_success_lists_deltas(self):
        result = ActionResult(resource_deltas={"food": -100}, activity_status="Training 2 villagers.")
        embed = GameView.format_result(result)
        self.assertEqual(embed.description, "Training 2 villagers.")
        self.assertEqual(embed.fields[0].value, "-100 food")

    def test_status_shows_tasks_and_population(self):
        self.logic.dispatch(ActionRequest("TRAIN_VILLAGER", {"count": 2}), NOW)
        embed = self.view.format_status(NOW + 15_000)
        fields = {field.name: field.value for field in embed.fields}
        self.assertEqual(fields["Population"], "3/20 (+2 training)")
        self.assertIn("Villager training", fields["Tasks"])

    def test_status_footer_shows_next_event_in_local_time(self):
        self.logic.state.next_event_at = 0
        self.assertIsNone(self.view.format_status(NOW).footer.text)
        self.logic.state.next_event_at = 3_600_000
        with patch("settlement.timeutils.TIMEZONE", "UTC"):
            embed = self.view.format_status(NOW)
        self.assertEqual(embed.footer.text, "Next event expected around 01:00 UTC")

    def test_inventory_marks_unusable_items(self):
        self.logic.state.inventory = [make_item("scroll_of_haste")]
        embed = self.view.format_inventory()
        self.assertIn("No active construction project.", embed.fields[0].value)

    def test_quiet_event(self):
        self.assertEqual(self.view.format_event(None).title, "🌄 All Quiet")
        event = self.logic.catalog.events[0]
        embed = self.view.format_event(event)
        self.assertEqual(len(embed.fields), len(event.choices))


class TestSessionKey(unittest.TestCase):

    def test_guild_and_dm_keys(self):
        interaction = MagicMock()
        interaction.guild_id = 123
        interaction.user.id = 456
        self.assertEqual(session_key(interaction), "123:456")
        interaction.guild_id = None
        self.assertEqual(session_key(interaction), "DM:456")


if __name__ == '__main__':
    unittest.main()
