"""
Route tests for the admin blueprint — user provisioning and audit logs.
"""


class TestUserManagement:
    """Tests for /admin/users."""

    def test_admin_provisions_user(self, client, login, users):
        login(users["admin"])
        response = client.post(
            "/admin/users",
            json={
                "email": "New.Head@Example.test",
                "first_name": "New",
                "last_name": "Head",
                "role": "hod",
                "department": "Finance",
            },
        )
        assert response.status_code == 201
        assert response.get_json()["user"]["email"] == "new.head@example.test"

        listed = client.get("/admin/users").get_json()
        assert listed["total"] == len(users) + 1

    def test_hod_requires_department(self, client, login, users):
        login(users["admin"])
        response = client.post(
            "/admin/users",
            json={"email": "x@example.test", "first_name": "X", "last_name": "Y", "role": "hod"},
        )
        assert response.status_code == 400

    def test_change_role(self, client, login, users):
        login(users["admin"])
        response = client.post(
            f"/admin/users/{users['applicant'].id}/role", json={"role": "interviewer"}
        )
        assert response.get_json()["user"]["role"] == "interviewer"

    def test_non_admin_is_forbidden(self, client, login, users):
        login(users["recruiter"])
        assert client.get("/admin/users").status_code == 403


class TestAuditLogs:
    """Tests for /admin/audit-logs."""

    def test_filter_by_entity(self, client, login, users, requisition):
        login(users["hr"])
        body = client.get(
            f"/admin/audit-logs?entity_type=requisition&entity_id={requisition.id}"
        ).get_json()
        assert [e["action_type"] for e in body["logs"]] == ["CREATE"]
