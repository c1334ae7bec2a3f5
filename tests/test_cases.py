"""API tests for cases: visibility, lifecycle stamps and public counters."""

from runners_api.models import Case
from support import ApiTestCase

CASES_URL = "/api/v1/cases"


class CaseTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.owner = self.make_user("owner@example.com", role="parent")
        self.other = self.make_user("other@example.com", role="parent")
        self.staff = self.make_user("staff@example.com", role="staff")
        self.admin = self.make_user("admin@example.com", role="admin")
        self.runner = self.create_runner(self.owner)

    def create_case(self, user=None, **overrides) -> dict:
        body = {"runnerId": self.runner["id"], "title": "Missing near the park"}
        body.update(overrides)
        response = self.client.post(CASES_URL, json=body, headers=self.auth(user or self.owner))
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


class TestCreateCase(CaseTestCase):
    def test_defaults(self) -> None:
        case = self.create_case(lastSeenLocation="Memorial Park")
        self.assertEqual(case["status"], "Open")
        self.assertEqual(case["priority"], "Medium")
        self.assertFalse(case["isPublic"])
        self.assertFalse(case["isApproved"])
        self.assertEqual(case["viewCount"], 0)
        self.assertEqual(case["reportedByUserId"], self.owner.id)
        self.assertEqual(case["lastSeenLocation"], "Memorial Park")

    def test_unknown_runner_is_a_validation_error(self) -> None:
        response = self.client.post(
            CASES_URL, json={"runnerId": 9999, "title": "Ghost"}, headers=self.auth(self.owner)
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("runnerId", response.json()["error"]["details"])

    def test_invalid_status_lists_allowed_values(self) -> None:
        response = self.client.post(
            CASES_URL,
            json={"runnerId": self.runner["id"], "title": "x", "status": "Lost"},
            headers=self.auth(self.owner),
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Open, Active, Missing", response.json()["error"]["details"]["status"])

    def test_cannot_report_on_someone_elses_runner(self) -> None:
        response = self.client.post(
            CASES_URL, json={"runnerId": self.runner["id"], "title": "x"}, headers=self.auth(self.other)
        )
        self.assertEqual(response.status_code, 403)

    def test_created_resolved_case_is_stamped(self) -> None:
        case = self.create_case(status="closed")
        self.assertEqual(case["status"], "Closed")
        self.assertIsNotNone(case["resolvedAt"])
        self.assertEqual(case["resolvedBy"], "owner@example.com")


class TestCaseVisibility(CaseTestCase):
    def test_owner_sees_cases_about_their_runner(self) -> None:
        self.create_case(user=self.staff, title="Reported by staff")
        body = self.client.get(CASES_URL, headers=self.auth(self.owner)).json()
        self.assertEqual(body["total"], 2)

    def test_other_user_sees_nothing_and_cannot_open(self) -> None:
        case = self.create_case()
        body = self.client.get(CASES_URL, headers=self.auth(self.other)).json()
        self.assertEqual(body["total"], 0)
        response = self.client.get(f"{CASES_URL}/{case['id']}", headers=self.auth(self.other))
        self.assertEqual(response.status_code, 403)

    def test_filters(self) -> None:
        self.create_case(priority="High", title="Urgent search")
        headers = self.auth(self.staff)
        high = self.client.get(CASES_URL, params={"priority": "High"}, headers=headers).json()
        self.assertEqual([c["title"] for c in high["data"]], ["Urgent search"])
        searched = self.client.get(CASES_URL, params={"q": "urgent"}, headers=headers).json()
        self.assertEqual(searched["total"], 1)
        by_runner = self.client.get(CASES_URL, params={"runnerId": self.runner["id"]}, headers=headers).json()
        self.assertEqual(by_runner["total"], 2)

    def test_filters_ignore_case_like_request_bodies(self) -> None:
        self.create_case(priority="High", title="Urgent search")
        headers = self.auth(self.staff)
        high = self.client.get(CASES_URL, params={"priority": "high"}, headers=headers).json()
        self.assertEqual([c["title"] for c in high["data"]], ["Urgent search"])
        active = self.client.get(CASES_URL, params={"status": "ACTIVE"}, headers=headers).json()
        self.assertTrue(active["data"])
        self.assertTrue(all(c["status"] == "Active" for c in active["data"]))
        response = self.client.get(CASES_URL, params={"status": "urgent"}, headers=headers)
        self.assertEqual(response.status_code, 400)
        self.assertIn("Value must be one of", response.json()["error"]["details"]["status"])

    def test_search_wildcards_match_literally(self) -> None:
        self.create_case(title="100% sure sighting")
        headers = self.auth(self.staff)
        self.assertEqual(self.client.get(CASES_URL, params={"q": "0%"}, headers=headers).json()["total"], 1)
        self.assertEqual(self.client.get(CASES_URL, params={"q": "_"}, headers=headers).json()["total"], 0)

    def test_get_counts_views(self) -> None:
        case = self.create_case()
        url = f"{CASES_URL}/{case['id']}"
        self.client.get(url, headers=self.auth(self.owner))
        second = self.client.get(url, headers=self.auth(self.owner)).json()
        self.assertEqual(second["viewCount"], 2)

    def test_public_listing_needs_no_token_and_hides_private_fields(self) -> None:
        self.create_case(isPublic=True, title="Public but unapproved")
        response = self.client.get(f"{CASES_URL}/public")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        # Only the approved companion profile case is listed.
        self.assertEqual(body["total"], 1)
        item = body["data"][0]
        self.assertEqual(item["title"], "Runner Profile - Sam Runner")
        self.assertNotIn("contactEmail", item)
        self.assertNotIn("reportedByUserId", item)


class TestCaseLifecycle(CaseTestCase):
    def test_resolved_status_stamps_and_reopen_clears(self) -> None:
        case = self.create_case()
        url = f"{CASES_URL}/{case['id']}/status"
        found = self.client.put(url, json={"status": "Found"}, headers=self.auth(self.staff)).json()
        self.assertEqual(found["status"], "Found")
        self.assertIsNotNone(found["resolvedAt"])
        self.assertEqual(found["resolvedBy"], "staff@example.com")

        reopened = self.client.put(url, json={"status": "Missing"}, headers=self.auth(self.staff)).json()
        self.assertIsNone(reopened["resolvedAt"])
        self.assertIsNone(reopened["resolvedBy"])

    def test_status_change_requires_privileged_caller(self) -> None:
        case = self.create_case()
        response = self.client.put(
            f"{CASES_URL}/{case['id']}/status", json={"status": "Found"}, headers=self.auth(self.owner)
        )
        self.assertEqual(response.status_code, 403)

    def test_approve_then_listed_publicly(self) -> None:
        case = self.create_case(isPublic=True)
        approved = self.client.put(
            f"{CASES_URL}/{case['id']}/approve", json={"isApproved": True}, headers=self.auth(self.staff)
        ).json()
        self.assertTrue(approved["isApproved"])
        self.assertEqual(approved["approvedBy"], "staff@example.com")
        public = self.client.get(f"{CASES_URL}/public").json()
        self.assertEqual(public["total"], 2)

    def test_verify_and_unverify(self) -> None:
        case = self.create_case()
        url = f"{CASES_URL}/{case['id']}/verify"
        verified = self.client.put(url, json={"isVerified": True}, headers=self.auth(self.admin)).json()
        self.assertTrue(verified["isVerified"])
        self.assertIsNotNone(verified["verifiedAt"])
        cleared = self.client.put(url, json={"isVerified": False}, headers=self.auth(self.admin)).json()
        self.assertIsNone(cleared["verifiedAt"])

    def test_owner_update_is_partial(self) -> None:
        case = self.create_case(description="Blue jacket")
        response = self.client.put(
            f"{CASES_URL}/{case['id']}",
            json={"title": "", "description": "Red jacket", "isPublic": True},
            headers=self.auth(self.owner),
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["title"], "Missing near the park")
        self.assertEqual(body["description"], "Red jacket")
        self.assertTrue(body["isPublic"])
        self.assertIsNotNone(body["updatedAt"])

    def test_delete_is_admin_only(self) -> None:
        case = self.create_case()
        url = f"{CASES_URL}/{case['id']}"
        self.assertEqual(self.client.delete(url, headers=self.auth(self.staff)).status_code, 403)
        self.assertEqual(self.client.delete(url, headers=self.auth(self.admin)).status_code, 204)
        self.assertIsNone(self.get_row(Case, case["id"]))


class TestCaseCounters(CaseTestCase):
    def _profile_case_id(self) -> int:
        cases = self.client.get(f"{CASES_URL}/public").json()["data"]
        return cases[0]["id"]

    def test_anonymous_share_and_tip_on_public_case(self) -> None:
        case_id = self._profile_case_id()
        shared = self.client.post(f"{CASES_URL}/{case_id}/share")
        self.assertEqual(shared.status_code, 200)
        self.assertEqual(shared.json()["shareCount"], 1)
        tipped = self.client.post(f"{CASES_URL}/{case_id}/tips").json()
        self.assertEqual(tipped["tipCount"], 1)
        self.assertEqual(tipped["shareCount"], 1)

    def test_private_case_hidden_from_anonymous(self) -> None:
        case = self.create_case()
        self.assertEqual(self.client.post(f"{CASES_URL}/{case['id']}/share").status_code, 404)
        owner = self.client.post(f"{CASES_URL}/{case['id']}/share", headers=self.auth(self.owner))
        self.assertEqual(owner.status_code, 200)
        stranger = self.client.post(f"{CASES_URL}/{case['id']}/tips", headers=self.auth(self.other))
        self.assertEqual(stranger.status_code, 403)
