"""
Tests for error handling across the application.

Tests graceful handling of:
- Invalid IDs and malformed requests
- AI client failures
- Expired sessions
"""
from datetime import timedelta
from io import BytesIO

from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.orm import Session

from app.models import AppUser
from tests.factories import create_session


class TestInvalidIdHandling:
    """Tests for handling invalid/non-existent IDs."""

    def test_invalid_flavor_id_format(self, auth_client: TestClient):
        response = auth_client.put(
            "/profile/preferences/flavors/invalid", json={"preferenceLevel": 5}
        )
        assert response.status_code == 422

    def test_non_numeric_dish_id(self, auth_client: TestClient):
        response = auth_client.post(
            "/api/recommendations/rate", json={"dishId": "abc", "rating": 3}
        )
        assert response.status_code == 422


class TestAIClientErrors:
    """Tests for handling unexpected AI client failures."""

    def test_upload_failure_is_500(self, client: TestClient, mock_ai_service):
        mock_ai_service.set_error(RuntimeError("Service down"))
        buffer = BytesIO()
        Image.new("RGB", (10, 10)).save(buffer, format="PNG")

        response = client.post(
            "/api/menu/upload",
            files={"file": ("menu.png", buffer.getvalue(), "image/png")},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to process menu: Service down"

    def test_classify_failure_is_500(self, client: TestClient, mock_ai_service):
        mock_ai_service.set_error(RuntimeError("Service down"))

        response = client.post("/api/menu/classify", json={"menu": {"Soup": "$4"}})

        assert response.status_code == 500


class TestSessionErrors:
    """Tests for expired or malformed credentials."""

    def test_expired_session_rejected(self, client: TestClient, db: Session, test_user: AppUser):
        session = create_session(db, test_user, expires_in=timedelta(seconds=-1))

        response = client.get(
            "/profile", headers={"Authorization": f"Bearer {session.token}"}
        )

        assert response.status_code == 401

    def test_session_cookie_accepted(self, client: TestClient, test_session):
        client.cookies.set("eatsadvisor_session", test_session.token)

        response = client.get("/profile")

        assert response.status_code == 200

    def test_malformed_json(self, auth_client: TestClient):
        response = auth_client.post(
            "/profile/preferences",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422
