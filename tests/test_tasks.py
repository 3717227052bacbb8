import unittest

from helpers import NOW, make_task

from settlement.tasks import GATHER, TRAIN_VILLAGER, TaskScheduler, make_task_id, progress


class TestTaskScheduler(unittest.TestCase):

    def setUp(self):
        self.tasks = []
        self.scheduler = TaskScheduler(self.tasks)

    def test_schedule_works_on_the_given_list(self):
        self.scheduler.schedule(make_task("t1", TRAIN_VILLAGER))
        self.assertEqual([t.id for t in self.tasks], ["t1"])

    def test_duplicate_id_raises(self):
        self.scheduler.schedule(make_task("t1", TRAIN_VILLAGER))
        with self.assertRaises(ValueError):
            self.scheduler.schedule(make_task("t1", TRAIN_VILLAGER))

    def test_task_ids_differ_by_discriminator(self):
        self.assertNotEqual(make_task_id(NOW, "build", "houses-1-1"), make_task_id(NOW, "build", "houses-2-1"))
        self.assertEqual(make_task_id(NOW, "research", "loom"), f"{NOW}-research-loom")

    def test_due_tasks_uses_deadline(self):
        self.scheduler.schedule(make_task("t1", TRAIN_VILLAGER, duration=1000))
        self.assertEqual(self.scheduler.due_tasks(NOW + 999), [])
        self.assertEqual([t.id for t in self.scheduler.due_tasks(NOW + 1000)], ["t1"])

    def test_gather_tasks_are_never_due(self):
        self.scheduler.schedule(make_task("g1", GATHER, duration=0))
        self.assertEqual(self.scheduler.due_tasks(NOW + 10**12), [])

    def test_resolve_is_idempotent(self):
        self.scheduler.schedule(make_task("t1", TRAIN_VILLAGER, duration=0))
        self.assertEqual(self.scheduler.resolve("t1").id, "t1")
        self.assertIsNone(self.scheduler.resolve("t1"))
        self.assertEqual(self.scheduler.due_tasks(NOW), [])

    def test_cancel_removes_task(self):
        self.scheduler.schedule(make_task("t1", TRAIN_VILLAGER))
        self.assertIsNotNone(self.scheduler.cancel("t1"))
        self.assertIsNone(self.scheduler.find("t1"))
        self.assertIsNone(self.scheduler.cancel("t1"))

    def test_replace_unknown_task_raises(self):
        with self.assertRaises(KeyError):
            self.scheduler.replace(make_task("missing", TRAIN_VILLAGER))

    def test_owner_of_matches_building_and_upgrade_tasks(self):
        self.scheduler.schedule(make_task("t1", TRAIN_VILLAGER, building_id="tc"))
        self.scheduler.schedule(make_task("u1", "upgrade_building", original_building_id="tower"))
        self.assertEqual(self.scheduler.owner_of("tc").id, "t1")
        self.assertEqual(self.scheduler.owner_of("tower").id, "u1")
        self.assertIsNone(self.scheduler.owner_of("house"))

    def test_progress_is_clamped(self):
        task = make_task("t1", TRAIN_VILLAGER, duration=1000)
        self.assertEqual(progress(task, NOW - 500), 0.0)
        self.assertAlmostEqual(progress(task, NOW + 250), 0.25)
        self.assertEqual(progress(task, NOW + 5000), 1.0)
        self.assertEqual(progress(make_task("t2", TRAIN_VILLAGER, duration=0), NOW), 1.0)


if __name__ == '__main__':
    unittest.main()
