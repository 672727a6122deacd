"""
Integration Tests for Authentication

Verifies that the main application correctly integrates:
- JWT verification dependency
- Protected route denial (401)
- Protected route access w/ valid auth
"""

from unittest.mock import AsyncMock, MagicMock


class TestAuthIntegration:

    def test_protected_route_no_auth(self, client):
        """Accessing a protected route without auth should return 401."""
        response = client.get("/api/subscriptions")
        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized"

    def test_protected_route_invalid_token(self, client):
        """Accessing with invalid token should return 401."""
        response = client.get(
            "/api/subscriptions",
            headers={"Authorization": "Bearer invalid.token.here"},
        )
        assert response.status_code == 401

    def test_protected_route_valid_auth(self, client, auth_headers, app):
        """With auth the route reaches the (mocked) repository."""
        from amy.api.dependencies import get_subscription_repository

        mock_repo = MagicMock()
        mock_repo.get = AsyncMock(return_value=None)

        # Override the dependency FUNCTION, not the type alias
        app.dependency_overrides[get_subscription_repository] = lambda: mock_repo

        response = client.get("/api/subscriptions/42", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Subscription not found"
        mock_repo.get.assert_awaited_once_with(42)
