"""Unit tests for the subscription cleanup job: delete-only cleanup_subscriptions and the CLI."""

import unittest
from unittest.mock import MagicMock, patch

from runners_api import cleanup
from runners_api.services.topics import cleanup_subscriptions


class TestCleanupNothingToDelete(unittest.TestCase):
    """When no row is old enough, cleanup_subscriptions returns 0 and still commits."""

    def test_returns_zero(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 0
        self.assertEqual(cleanup_subscriptions(session, 90), 0)
        session.commit.assert_called_once()


class TestCleanupDeletesOldRows(unittest.TestCase):
    """Old unsubscribed rows are bulk-deleted without loading them."""

    def test_deletes_and_reports_count(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.delete.return_value = 3
        self.assertEqual(cleanup_subscriptions(session, 30), 3)
        session.query.return_value.filter.return_value.delete.assert_called_once_with(synchronize_session=False)
        session.add.assert_not_called()
        session.commit.assert_called_once()


class TestCleanupMain(unittest.TestCase):
    """main() returns a process exit code and always closes its session."""

    @patch.object(cleanup, "cleanup_subscriptions", return_value=4)
    @patch.object(cleanup, "SessionLocal")
    def test_success_returns_zero(self, session_factory: MagicMock, run: MagicMock) -> None:
        self.assertEqual(cleanup.main(), 0)
        session = session_factory.return_value
        run.assert_called_once_with(session, cleanup.get_settings().SUBSCRIPTION_CLEANUP_DAYS)
        session.close.assert_called_once()

    @patch.object(cleanup, "cleanup_subscriptions", side_effect=RuntimeError("db down"))
    @patch.object(cleanup, "SessionLocal")
    def test_failure_returns_one(self, session_factory: MagicMock, run: MagicMock) -> None:
        with self.assertLogs("runners_api.cleanup", level="ERROR"):
            self.assertEqual(cleanup.main(), 1)
        session_factory.return_value.close.assert_called_once()
