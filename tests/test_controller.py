"""Behavior tests for the browser controller.

Drives the controller with key tokens against a fake remote host and checks
navigation, selection, and download bookkeeping on ``BrowserState``.
"""

from __future__ import annotations

import tarfile
import tempfile
import unittest
from pathlib import Path

from lazyssm.remote.listing import list_directory
from lazyssm.remote.types import TransferOutcome
from lazyssm.runtime.controller import BrowserController
from lazyssm.runtime.events import TaskCrashed, TransferCompleted
from lazyssm.runtime.state import MODE_BROWSING, BrowserState
from remote_fakes import DeferredRunner, FakeRemoteHost, ImmediateRunner


class ControllerTestCase(unittest.TestCase):
    runner_factory = ImmediateRunner

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        base = Path(self._tmp.name)
        self.remote_root = base / "remote"
        self.local_dir = base / "downloads"
        self.local_dir.mkdir()
        home = self.remote_root / "home" / "u"
        (home / "logs").mkdir(parents=True)
        (home / "a.txt").write_text("hi", encoding="utf-8")
        (home / "b.txt").write_text("second", encoding="utf-8")
        (home / ".hidden").write_text("secret", encoding="utf-8")
        (home / "logs" / "x.log").write_text("log line\n", encoding="utf-8")
        self.home = home
        self.host = FakeRemoteHost(self.remote_root)
        self.saved_hidden: list[bool] = []

        self.state = BrowserState(
            host_label="u@example",
            directory_stack=["/home/u"],
            entries=list_directory(self.host.session(), "/home/u", False),
            show_hidden=False,
            viewport_height=10,
        )
        self.runner = self.runner_factory()
        self.controller = BrowserController(
            self.state,
            self.runner,
            self.host.session,
            self.local_dir,
            save_show_hidden=self.saved_hidden.append,
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def press(self, *keys: str) -> bool:
        quit_requested = False
        for key in keys:
            quit_requested = self.controller.handle_key(key)
        return quit_requested

    def pump(self) -> None:
        for event in self.runner.drain_events():
            self.controller.handle_event(event)

    def names(self) -> list[str]:
        return [entry.name for entry in self.state.entries]


class NavigationTests(ControllerTestCase):
    def test_initial_listing_hides_dotfiles(self) -> None:
        self.assertEqual(self.names(), ["a.txt", "b.txt", "logs"])

    def test_cursor_stays_within_bounds(self) -> None:
        self.press("UP", "k")
        self.assertEqual(self.state.cursor, 0)

        self.press("j", "j", "j", "j", "DOWN")
        self.assertEqual(self.state.cursor, 2)

        self.press("g")
        self.assertEqual(self.state.cursor, 0)
        self.press("G")
        self.assertEqual(self.state.cursor, 2)

    def test_enter_directory_then_back_resets_selection(self) -> None:
        self.press("SPACE", "G")
        self.assertEqual(self.state.selected, {0})

        self.press("ENTER")
        self.assertTrue(self.state.loading)
        self.pump()

        self.assertFalse(self.state.loading)
        self.assertEqual(self.state.directory_stack, ["/home/u", "/home/u/logs"])
        self.assertEqual(self.names(), ["x.log"])
        self.assertEqual(self.state.selected, set())
        self.assertEqual(self.state.cursor, 0)
        self.assertEqual(self.state.status_message, "/home/u/logs: 1 entry")

        self.press("SPACE")
        self.press("BACKSPACE")
        self.pump()

        self.assertEqual(self.state.directory_stack, ["/home/u"])
        self.assertEqual(self.names(), ["a.txt", "b.txt", "logs"])
        self.assertEqual(self.state.selected, set())
        self.assertEqual(self.state.status_message, "/home/u: 3 entries")

    def test_enter_on_file_toggles_selection(self) -> None:
        self.press("ENTER")
        self.assertEqual(self.state.selected, {0})
        self.assertEqual(self.runner.submitted, [])
        self.press("ENTER")
        self.assertEqual(self.state.selected, set())

    def test_back_at_starting_directory_is_a_no_op(self) -> None:
        self.press("BACKSPACE", "h", "LEFT")
        self.assertEqual(self.state.directory_stack, ["/home/u"])
        self.assertEqual(self.runner.submitted, [])

    def test_listing_failure_keeps_directory_and_reports_error(self) -> None:
        (self.home / "logs" / "x.log").unlink()
        (self.home / "logs").rmdir()

        self.press("G", "ENTER")
        self.pump()

        self.assertFalse(self.state.loading)
        self.assertEqual(self.state.directory_stack, ["/home/u"])
        self.assertEqual(self.names(), ["a.txt", "b.txt", "logs"])
        self.assertTrue(self.state.status_message.startswith("Error: cannot list /home/u/logs"))
        self.assertTrue(self.state.status_is_error)

        self.press("r")
        self.pump()
        self.assertFalse(self.state.status_is_error)

    def test_refresh_picks_up_new_remote_files(self) -> None:
        (self.home / "c.txt").write_text("new", encoding="utf-8")
        self.press("r")
        self.pump()
        self.assertEqual(self.names(), ["a.txt", "b.txt", "c.txt", "logs"])

    def test_select_all_toggles_between_all_and_none(self) -> None:
        self.press("a")
        self.assertEqual(self.state.selected, {0, 1, 2})
        self.press("a")
        self.assertEqual(self.state.selected, set())

    def test_quit_keys_request_exit(self) -> None:
        self.assertFalse(self.press("x"))
        self.assertTrue(self.press("q"))

    def test_help_toggle_marks_state_dirty(self) -> None:
        self.state.dirty = False
        self.press("?")
        self.assertTrue(self.state.show_help)
        self.assertTrue(self.state.dirty)


class HiddenFilesTests(ControllerTestCase):
    def test_toggle_hidden_relists_and_persists_preference(self) -> None:
        self.press(".")
        self.pump()

        self.assertTrue(self.state.show_hidden)
        self.assertEqual(self.names(), [".hidden", "a.txt", "b.txt", "logs"])
        self.assertEqual(self.saved_hidden, [True])

    def test_failed_toggle_restores_previous_preference(self) -> None:
        self.host.channel_failures = 1

        self.press(".")
        self.pump()

        self.assertFalse(self.state.show_hidden)
        self.assertEqual(self.names(), ["a.txt", "b.txt", "logs"])
        self.assertEqual(self.saved_hidden, [])
        self.assertTrue(self.state.status_message.startswith("Error:"))

    def test_refresh_does_not_persist_preference(self) -> None:
        self.press("r")
        self.pump()
        self.assertEqual(self.saved_hidden, [])


class DownloadTests(ControllerTestCase):
    def test_download_without_selection_only_sets_status(self) -> None:
        self.press("d")
        self.assertEqual(self.state.status_message, "Nothing selected: press Space to mark entries")
        self.assertEqual(self.state.mode, MODE_BROWSING)
        self.assertEqual(self.runner.submitted, [])

    def test_end_to_end_file_and_directory_download(self) -> None:
        self.press("SPACE", "G", "SPACE", "d")
        self.pump()

        self.assertEqual((self.local_dir / "a.txt").read_text(encoding="utf-8"), "hi")
        with tarfile.open(self.local_dir / "logs.tar.gz", "r:gz") as tar:
            self.assertIn("logs/x.log", tar.getnames())
        self.assertEqual(self.state.status_message, f"Downloaded 2 items to {self.local_dir}")
        self.assertFalse(self.state.status_is_error)
        self.assertEqual(self.state.batch_summary, self.state.status_message)
        self.assertEqual(self.state.mode, MODE_BROWSING)
        self.assertEqual(self.state.selected, set())
        self.assertEqual(self.state.cursor, 0)

    def test_successful_file_named_failed_is_not_an_error(self) -> None:
        (self.home / "failed_jobs.csv").write_text("id\n", encoding="utf-8")
        self.press("r")
        self.pump()

        self.assertEqual(self.names(), ["a.txt", "b.txt", "failed_jobs.csv", "logs"])
        self.press("j", "j", "SPACE", "d")
        self.pump()

        self.assertEqual(self.state.status_message, f"Downloaded 1 item to {self.local_dir}")
        self.assertFalse(self.state.status_is_error)
        self.assertTrue((self.local_dir / "failed_jobs.csv").is_file())

    def test_summary_survives_later_listing_status(self) -> None:
        self.press("SPACE", "d")
        self.pump()
        summary = self.state.status_message

        self.press("r")
        self.pump()

        self.assertEqual(self.state.status_message, "/home/u: 3 entries")
        self.assertEqual(self.state.batch_summary, summary)

    def test_failed_item_is_summarized_and_others_complete(self) -> None:
        self.host.failing_cat_paths.add("/home/u/a.txt")

        self.press("a", "d")
        self.pump()

        self.assertTrue((self.local_dir / "b.txt").is_file())
        self.assertTrue((self.local_dir / "logs.tar.gz").is_file())
        self.assertFalse((self.local_dir / "a.txt").exists())
        self.assertTrue(self.state.status_message.startswith("Downloaded 2/3; failed: a.txt ("))
        self.assertTrue(self.state.status_is_error)
        self.assertEqual(self.state.batch_summary, self.state.status_message)
        self.assertEqual(self.state.transfer_failures[0].split(" ")[0], "a.txt")

    def test_lost_connection_fails_every_entry(self) -> None:
        self.host.channel_failures = 1

        self.press("SPACE", "j", "SPACE", "d")
        self.pump()

        self.assertTrue(self.state.status_message.startswith("Downloaded 0/2; failed: a.txt ("))
        self.assertIn("; b.txt (", self.state.status_message)
        self.assertEqual(self.state.mode, MODE_BROWSING)

    def test_busy_runner_refuses_download(self) -> None:
        self.runner.refuse = True
        self.press("SPACE", "d")

        self.assertEqual(self.state.mode, MODE_BROWSING)
        self.assertEqual(self.state.selected, {0})
        self.assertTrue(self.state.status_message.startswith("Busy:"))


class InFlightDownloadTests(ControllerTestCase):
    runner_factory = DeferredRunner

    def pump(self) -> None:
        for event in self.runner.run_pending():
            self.controller.handle_event(event)

    def test_keys_are_ignored_while_downloading(self) -> None:
        self.press("SPACE", "d")
        self.assertTrue(self.state.downloading)
        status = self.state.status_message
        self.assertEqual(status, f"Downloading 1 item to {self.local_dir} ...")

        self.press("j", "SPACE", "d", "a", "r", ".")
        self.press("G", "ENTER")

        self.assertEqual(self.state.selected, {0})
        self.assertEqual(self.state.status_message, status)
        self.assertEqual(len(self.runner.pending), 1)

        self.pump()
        self.assertFalse(self.state.downloading)
        self.assertEqual(self.state.status_message, f"Downloaded 1 item to {self.local_dir}")

    def test_progress_status_reports_each_completed_item(self) -> None:
        self.press("SPACE", "j", "SPACE", "d")
        outcome = TransferOutcome.success("a.txt", self.local_dir / "a.txt")

        self.controller.handle_event(TransferCompleted(outcome=outcome))

        self.assertEqual(self.state.status_message, f"[1/2] Downloaded a.txt -> {self.local_dir / 'a.txt'}")
        self.assertTrue(self.state.downloading)
        self.assertEqual(self.state.pending_transfers, 1)

    def test_crashed_task_returns_to_browsing(self) -> None:
        self.press("SPACE", "d")
        self.runner.pending.clear()

        self.controller.handle_event(TaskCrashed(task_name="download", reason="boom"))

        self.assertEqual(self.state.mode, MODE_BROWSING)
        self.assertEqual(self.state.selected, set())
        self.assertEqual(self.state.status_message, "Error: download failed: boom")

    def test_superseded_listing_result_is_ignored(self) -> None:
        self.press("G", "ENTER")
        task_events = self.runner.run_pending()
        self.controller._pending_listing = None

        for event in task_events:
            self.controller.handle_event(event)

        self.assertEqual(self.state.directory_stack, ["/home/u"])
        self.assertEqual(self.names(), ["a.txt", "b.txt", "logs"])


if __name__ == "__main__":
    unittest.main()
