"""
Unit tests for notification_forwarder/dispatcher.py

Tests dispatch ordering, send-before-mark sequencing and mark-as-read failures.
"""

import unittest
from unittest.mock import Mock, call

from notification_forwarder.config import AppConfig
from notification_forwarder.dispatcher import (
    MarkReadError,
    dispatch,
    mark_as_read,
    order_notifications,
)
from notification_forwarder.github_client import GitHubAPIError
from notification_forwarder.slack_notifier import SlackAPIError
from tests.fixtures.mock_helpers import create_mock_github_client, create_mock_notifier
from tests.fixtures.notification_factory import create_notification


def _config(**overrides):
    values = {
        "github_token": "gh",
        "slack_token": "sl",
        "slack_destination": "#github",
        "action_schedule": "0 * * * *",
    }
    values.update(overrides)
    return AppConfig(**values)


class TestOrderNotifications(unittest.TestCase):
    """Tests for order_notifications()"""

    def setUp(self):
        self.notifications = [create_notification(id=i) for i in ("3", "2", "1")]

    def test_default_keeps_fetch_order(self):
        ordered = order_notifications(self.notifications)

        self.assertEqual([n.id for n in ordered], ["3", "2", "1"])

    def test_oldest_first_reverses(self):
        ordered = order_notifications(self.notifications, sort_oldest_first=True)

        self.assertEqual([n.id for n in ordered], ["1", "2", "3"])
        # Input is left untouched
        self.assertEqual([n.id for n in self.notifications], ["3", "2", "1"])


class TestMarkAsRead(unittest.TestCase):
    """Tests for mark_as_read()"""

    def test_marks_each_in_order(self):
        client = create_mock_github_client()
        notifications = [create_notification(id=i) for i in ("a", "b", "c")]

        marked = mark_as_read(client, notifications)

        self.assertEqual(marked, 3)
        self.assertEqual(
            client.mark_thread_read.call_args_list,
            [call("a"), call("b"), call("c")],
        )

    def test_failure_stops_remaining(self):
        """Failure on item k leaves 1..k-1 marked and never tries k+1..n"""
        client = create_mock_github_client()
        client.mark_thread_read.side_effect = [None, GitHubAPIError(500, "oops"), None]
        notifications = [create_notification(id=i) for i in ("a", "b", "c")]

        with self.assertRaises(MarkReadError) as ctx:
            mark_as_read(client, notifications)

        self.assertEqual(ctx.exception.thread_id, "b")
        self.assertEqual(ctx.exception.marked, 1)
        self.assertEqual(client.mark_thread_read.call_args_list, [call("a"), call("b")])


class TestDispatch(unittest.TestCase):
    """Tests for dispatch()"""

    def setUp(self):
        self.client = create_mock_github_client()
        self.notifier = create_mock_notifier()
        self.notifications = [create_notification(id=i) for i in ("3", "2", "1")]

    def test_sends_in_fetch_order_by_default(self):
        sent = dispatch(self.notifier, self.client, self.notifications, _config())

        self.notifier.send.assert_called_once()
        args, kwargs = self.notifier.send.call_args
        self.assertEqual(args[0], "#github")
        self.assertEqual([n.id for n in args[1]], ["3", "2", "1"])
        self.assertTrue(kwargs["rollup"])
        self.assertEqual([n.id for n in sent], ["3", "2", "1"])
        self.client.mark_thread_read.assert_not_called()

    def test_sends_oldest_first_when_configured(self):
        dispatch(self.notifier, self.client, self.notifications, _config(sort_oldest_first=True))

        self.assertEqual([n.id for n in self.notifier.send.call_args[0][1]], ["1", "2", "3"])

    def test_marks_in_dispatch_order_after_send(self):
        manager = Mock()
        manager.attach_mock(self.notifier.send, "send")
        manager.attach_mock(self.client.mark_thread_read, "mark_thread_read")

        dispatch(
            self.notifier,
            self.client,
            self.notifications,
            _config(mark_as_read=True, sort_oldest_first=True),
        )

        names = [c[0] for c in manager.mock_calls]
        self.assertEqual(names, ["send", "mark_thread_read", "mark_thread_read", "mark_thread_read"])
        self.assertEqual(
            self.client.mark_thread_read.call_args_list,
            [call("1"), call("2"), call("3")],
        )

    def test_send_failure_marks_nothing(self):
        self.notifier.send.side_effect = SlackAPIError(200, "channel_not_found")

        with self.assertRaises(SlackAPIError):
            dispatch(self.notifier, self.client, self.notifications, _config(mark_as_read=True))

        self.client.mark_thread_read.assert_not_called()

    def test_passes_formatting_options(self):
        config = _config(
            rollup_notifications=False,
            timezone="Europe/Berlin",
            date_format="%d.%m.",
            time_format="%H:%M",
        )

        dispatch(self.notifier, self.client, self.notifications, config)

        kwargs = self.notifier.send.call_args[1]
        self.assertFalse(kwargs["rollup"])
        self.assertEqual(kwargs["timezone"], "Europe/Berlin")
        self.assertEqual(kwargs["date_format"], "%d.%m.")
        self.assertEqual(kwargs["time_format"], "%H:%M")


if __name__ == "__main__":
    unittest.main()
