from __future__ import annotations

from unittest.mock import Mock, patch

from schemadoc.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch("schemadoc.services.progress.is_tty_enabled", return_value=True), \
             patch("schemadoc.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(5, description="Import", unit="sheet")
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Import",
                unit="sheet",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch("schemadoc.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(5)
            assert tracker.enabled is False
            assert tracker.pbar is None
            # no-ops without a bar
            tracker.start("users")
            tracker.finish(success=False)
            tracker.set_postfix(rows=1)
            tracker.close()
            assert tracker.current == 1

    def test_start_and_finish_update_bar(self):
        mock_pbar = Mock()
        with patch("schemadoc.services.progress.is_tty_enabled", return_value=True), \
             patch("schemadoc.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker(2, description="Export")
            tracker.start("users")
            mock_pbar.set_description.assert_called_with("Export (users)")
            tracker.finish()
            mock_pbar.update.assert_called_once_with(1)
            mock_pbar.set_description.assert_called_with("Export")

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch("schemadoc.services.progress.is_tty_enabled", return_value=True), \
             patch("schemadoc.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker(1) as tracker:
                tracker.set_postfix(rows=3)
            mock_pbar.set_postfix.assert_called_once_with(rows=3)
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None

    def test_failed_items_shown_in_postfix(self):
        mock_pbar = Mock()
        with patch("schemadoc.services.progress.is_tty_enabled", return_value=True), \
             patch("schemadoc.services.progress.tqdm", return_value=mock_pbar):
            tracker = ProgressTracker(3)
            tracker.start("a")
            tracker.finish(success=True)
            mock_pbar.set_postfix.assert_not_called()
            tracker.start("b")
            tracker.finish(success=False)
            assert tracker.failed == 1
            mock_pbar.set_postfix.assert_called_once_with(failed=1)
            assert mock_pbar.update.call_count == 2

    def test_failures_counted_without_bar(self):
        with patch("schemadoc.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(2)
            tracker.finish(success=False)
            tracker.finish(success=True)
            assert tracker.failed == 1
