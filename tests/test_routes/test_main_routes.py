"""
Smoke tests for the main and auth blueprint routes.

These verify that the application starts up correctly, that the
health check responds, and that sessions come from dev login.
"""


class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, client):
        """The health check should report a connected database."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "database": "connected"}


class TestDashboard:
    """Tests for the role dashboard."""

    def test_dashboard_requires_login(self, client):
        response = client.get("/")
        assert response.status_code == 401
        assert response.get_json()["code"] == "UNAUTHORIZED"

    def test_dashboard_counts_for_hod(self, client, login, users, requisition):
        login(users["hod"])
        body = client.get("/").get_json()
        assert body["role"] == "hod"
        assert body["requisitions"] == {"pending": 1, "approved": 0, "rejected": 0}
        assert body["unread_notifications"] == 1


class TestAuth:
    """Tests for the auth blueprint."""

    def test_dev_login_by_role(self, client, users):
        response = client.post("/auth/dev-login?role=coo")
        assert response.status_code == 200
        assert response.get_json()["user"]["id"] == users["coo"].id

        me = client.get("/auth/me").get_json()
        assert me["user"]["role"] == "coo"

    def test_dev_login_unknown_role(self, client, users):
        response = client.post("/auth/dev-login?role=ceo")
        assert response.status_code == 404

    def test_inactive_user_cannot_log_in(self, client, make_user):
        user = make_user("hr", is_active=False)
        response = client.post(f"/auth/dev-login?user_id={user.id}")
        assert response.status_code == 404

    def test_dev_login_disabled(self, app, client, users):
        app.config["DEV_LOGIN_ENABLED"] = False
        try:
            response = client.post("/auth/dev-login?role=admin")
        finally:
            app.config["DEV_LOGIN_ENABLED"] = True
        assert response.status_code == 404

    def test_logout(self, client, login, users):
        login(users["hr"])
        assert client.post("/auth/logout").status_code == 200
        assert client.get("/auth/me").status_code == 401
