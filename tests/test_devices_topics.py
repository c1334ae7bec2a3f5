"""API tests for device registration and topic subscriptions."""

from datetime import timedelta
from unittest.mock import patch

from sqlalchemy.orm import Session

from runners_api.core.database import SessionLocal
from runners_api.core.timeutil import utcnow
from runners_api.models import Device, TopicSubscription, User
from runners_api.services import topics
from runners_api.services.topics import cleanup_subscriptions, default_topics_for_role
from support import ApiTestCase

DEVICES_URL = "/api/v1/devices"
TOPICS_URL = "/api/v1/topics"


class TestDevices(ApiTestCase):
    """POST /devices/register upserts one row per (user, platform)."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user("phone@example.com", role="parent")
        self.headers = self.auth(self.user)

    def _register(self, platform: str = "ios", token: str = "tok-1", **extra):
        body = {"platform": platform, "pushToken": token, **extra}
        return self.client.post(f"{DEVICES_URL}/register", json=body, headers=self.headers)

    def test_first_device_subscribes_default_topics(self) -> None:
        response = self._register(appVersion="1.2.0")
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertTrue(body["created"])
        self.assertEqual(body["subscribedTopics"], ["org_all", "org_system", "role_parent"])
        self.assertEqual(body["device"]["appVersion"], "1.2.0")
        self.assertEqual(self.count_rows(TopicSubscription, TopicSubscription.user_id == self.user.id), 3)

    def test_concurrent_first_registration_conflicts_cleanly(self) -> None:
        subscribe_defaults = topics.subscribe_defaults

        def racing_insert(db: Session, user: User) -> list[str]:
            # Row a parallel request for the same (user, platform) added first.
            db.add(Device(user_id=user.id, platform="ios", is_active=True, created_at=utcnow()))
            return subscribe_defaults(db, user)

        with patch.object(topics, "subscribe_defaults", side_effect=racing_insert):
            response = self._register()
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "DEVICE_CONFLICT")
        self.assertEqual(self.count_rows(Device), 0)
        self.assertEqual(self.count_rows(TopicSubscription), 0)
        self.assertEqual(self._register().status_code, 200)
        self.assertEqual(self.count_rows(Device), 1)

    def test_reregistering_updates_in_place(self) -> None:
        self._register(token="tok-1")
        second = self._register(platform="IOS", token="tok-2").json()
        self.assertFalse(second["created"])
        self.assertEqual(second["subscribedTopics"], [])
        self.assertEqual(second["device"]["pushToken"], "tok-2")
        self.assertEqual(self.count_rows(Device, Device.user_id == self.user.id), 1)

    def test_second_platform_does_not_resubscribe_defaults(self) -> None:
        self._register("ios")
        self.client.post(f"{TOPICS_URL}/unsubscribe", json={"topic": "org_system"}, headers=self.headers)
        android = self._register("android").json()
        self.assertTrue(android["created"])
        self.assertEqual(android["subscribedTopics"], [])
        active = self.client.get(f"{TOPICS_URL}/subscriptions", headers=self.headers).json()
        self.assertNotIn("org_system", [s["topic"] for s in active])

    def test_unknown_platform_is_rejected(self) -> None:
        response = self._register(platform="windows")
        self.assertEqual(response.status_code, 400)
        self.assertIn("platform", response.json()["error"]["details"])

    def test_unregister_hides_device_and_heartbeat_needs_one(self) -> None:
        self._register("android")
        beat = self.client.post(f"{DEVICES_URL}/heartbeat", params={"platform": "android"}, headers=self.headers)
        self.assertEqual(beat.status_code, 200)
        self.assertIsNotNone(beat.json()["lastSeenAt"])

        gone = self.client.delete(f"{DEVICES_URL}/unregister", params={"platform": "android"}, headers=self.headers)
        self.assertEqual(gone.status_code, 200)
        self.assertFalse(gone.json()["isActive"])
        self.assertEqual(self.client.get(DEVICES_URL, headers=self.headers).json(), [])

        missing = self.client.delete(f"{DEVICES_URL}/unregister", params={"platform": "ios"}, headers=self.headers)
        self.assertEqual(missing.status_code, 404)


class TestTopics(ApiTestCase):
    """Subscriptions are idempotent and limited to the catalogue plus case_<id> topics."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user("reader@example.com", role="parent")
        self.staff = self.make_user("staff@example.com", role="staff")
        self.headers = self.auth(self.user)

    def test_default_topics_for_role(self) -> None:
        self.assertEqual(default_topics_for_role("admin"), ["org_all", "org_system", "role_admin"])
        self.assertEqual(default_topics_for_role("therapist"), ["org_all", "org_system"])

    def test_subscribe_twice_keeps_one_row(self) -> None:
        for _ in range(2):
            response = self.client.post(f"{TOPICS_URL}/subscribe", json={"topic": "Priority_High"}, headers=self.headers)
            self.assertEqual(response.status_code, 200, response.text)
            self.assertTrue(response.json()["isSubscribed"])
        self.assertEqual(self.count_rows(TopicSubscription, TopicSubscription.topic == "priority_high"), 1)

    def test_unknown_topic_is_rejected(self) -> None:
        response = self.client.post(f"{TOPICS_URL}/subscribe", json={"topic": "weather"}, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "INVALID_TOPIC")

    def test_case_topic_requires_existing_case(self) -> None:
        runner = self.create_runner(self.user)
        case_id = self.client.get(f"/api/v1/runners/{runner['id']}/cases", headers=self.headers).json()[0]["id"]
        ok = self.client.post(f"{TOPICS_URL}/subscribe", json={"topic": f"case_{case_id}"}, headers=self.headers)
        self.assertEqual(ok.status_code, 200)
        missing = self.client.post(f"{TOPICS_URL}/subscribe", json={"topic": "case_9999"}, headers=self.headers)
        self.assertEqual(missing.status_code, 400)

    def test_unsubscribe_without_subscription_succeeds(self) -> None:
        response = self.client.post(f"{TOPICS_URL}/unsubscribe", json={"topic": "org_all"}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["isSubscribed"])

    def test_bulk_reports_per_topic_results(self) -> None:
        response = self.client.post(
            f"{TOPICS_URL}/bulk-subscribe",
            json={"topics": ["org_all", "nope", "priority_high", "org_all"]},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["summary"], {"total": 4, "success": 3, "failures": 1})
        self.assertFalse(body["results"][1]["success"])
        self.assertEqual(self.count_rows(TopicSubscription, TopicSubscription.user_id == self.user.id), 2)

    def test_bulk_out_of_range_case_topic_fails_alone(self) -> None:
        response = self.client.post(
            f"{TOPICS_URL}/bulk-subscribe",
            json={"topics": ["org_all", "case_99999999999999999999", "case_0"]},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["summary"], {"total": 3, "success": 1, "failures": 2})
        self.assertEqual([r["success"] for r in body["results"]], [True, False, False])
        self.assertEqual(self.count_rows(TopicSubscription, TopicSubscription.user_id == self.user.id), 1)

    def test_bulk_unsubscribe(self) -> None:
        self.client.post(f"{TOPICS_URL}/bulk-subscribe", json={"topics": ["org_all", "org_system"]}, headers=self.headers)
        self.client.post(
            f"{TOPICS_URL}/bulk-subscribe",
            json={"topics": ["org_all"], "subscribe": False},
            headers=self.headers,
        )
        active = self.client.get(f"{TOPICS_URL}/subscriptions", headers=self.headers).json()
        self.assertEqual([s["topic"] for s in active], ["org_system"])
        everything = self.client.get(
            f"{TOPICS_URL}/subscriptions", params={"includeInactive": "true"}, headers=self.headers
        ).json()
        self.assertEqual(len(everything), 2)

    def test_available_marks_subscribed_topics(self) -> None:
        self.client.post(f"{TOPICS_URL}/subscribe", json={"topic": "region_tx_dallas"}, headers=self.headers)
        topics = self.client.get(f"{TOPICS_URL}/available", headers=self.headers).json()["topics"]
        flags = {t["name"]: t["isSubscribed"] for t in topics}
        self.assertTrue(flags["region_tx_dallas"])
        self.assertFalse(flags["region_tx_houston"])

    def test_notify_counts_and_stats(self) -> None:
        self.client.post(f"{TOPICS_URL}/subscribe", json={"topic": "org_all"}, headers=self.headers)
        self.client.post(f"{TOPICS_URL}/subscribe", json={"topic": "org_all"}, headers=self.auth(self.staff))

        forbidden = self.client.post(
            f"{TOPICS_URL}/org_all/notify", json={"title": "Hi", "body": "Hello"}, headers=self.headers
        )
        self.assertEqual(forbidden.status_code, 403)

        sent = self.client.post(
            f"{TOPICS_URL}/org_all/notify", json={"title": "Hi", "body": "Hello"}, headers=self.auth(self.staff)
        )
        self.assertEqual(sent.status_code, 200, sent.text)
        self.assertEqual(sent.json(), {"topic": "org_all", "recipients": 2})

        status = self.client.get(f"{TOPICS_URL}/status", params={"topic": "org_all"}, headers=self.headers).json()
        self.assertEqual(status["notificationCount"], 1)
        self.assertIsNotNone(status["lastNotificationSent"])

        stats = self.client.get(f"{TOPICS_URL}/stats", headers=self.auth(self.staff)).json()
        self.assertEqual(stats["activeSubscriptions"], 2)
        self.assertEqual(stats["topics"], [{"topic": "org_all", "subscribers": 2}])


class TestSubscriptionCleanup(ApiTestCase):
    """cleanup_subscriptions only removes long-unsubscribed rows."""

    def test_old_unsubscribed_rows_are_deleted(self) -> None:
        user = self.make_user("old@example.com")
        now = utcnow()
        with SessionLocal() as db:
            db.add_all(
                [
                    TopicSubscription(user_id=user.id, topic="org_all", is_subscribed=False,
                                      unsubscribed_at=now - timedelta(days=120), notification_count=0, created_at=now),
                    TopicSubscription(user_id=user.id, topic="org_system", is_subscribed=False,
                                      unsubscribed_at=now - timedelta(days=5), notification_count=0, created_at=now),
                    TopicSubscription(user_id=user.id, topic="priority_high", is_subscribed=True,
                                      notification_count=0, created_at=now),
                ]
            )
            db.commit()
            self.assertEqual(cleanup_subscriptions(db, 90), 1)
            self.assertEqual(cleanup_subscriptions(db, 90), 0)
        self.assertEqual(self.count_rows(TopicSubscription), 2)
