"""
Integration tests for Profile API.

Tests the preference endpoints including:
- Authentication requirements
- Replace-by-category writes and the aggregated read
- Single flavor preference validation
"""
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import AppUser, Profile
from tests.factories import create_flavor


class TestProfileAuthentication:
    """Tests for profile endpoint authentication."""

    def test_get_preferences_requires_auth(self, client: TestClient):
        response = client.get("/profile/preferences")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_set_preferences_requires_auth(self, client: TestClient):
        response = client.post("/profile/preferences", json={"allergies": ["Peanuts"]})

        assert response.status_code == 401

    def test_invalid_token_rejected(self, client: TestClient):
        response = client.get(
            "/profile/preferences", headers={"Authorization": "Bearer invalid"}
        )

        assert response.status_code == 401


class TestGetProfile:
    """Tests for GET /profile."""

    def test_profile_id_none_before_first_write(self, auth_client: TestClient, test_user: AppUser):
        response = auth_client.get("/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == test_user.email
        assert data["profileId"] is None


class TestPreferences:
    """Tests for GET/POST /profile/preferences."""

    def test_empty_document_without_profile(self, auth_client: TestClient):
        response = auth_client.get("/profile/preferences")

        assert response.status_code == 200
        assert response.json() == {
            "allergies": [],
            "dietaryConstraints": [],
            "flavorPreferences": {},
            "specificDishes": [],
            "specialPreferences": [],
        }

    def test_set_then_get(self, auth_client: TestClient, db: Session, test_user: AppUser):
        response = auth_client.post(
            "/profile/preferences",
            json={
                "allergies": ["Peanuts", "Shellfish"],
                "flavorPreferences": {"Sweet": 8, "Spicy": 6},
                "dietaryConstraints": ["Vegetarian"],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Preferences updated successfully"

        data = auth_client.get("/profile/preferences").json()
        assert sorted(data["allergies"]) == ["Peanuts", "Shellfish"]
        assert data["flavorPreferences"] == {"Sweet": 8, "Spicy": 6}
        assert data["dietaryConstraints"] == ["Vegetarian"]
        assert data["specificDishes"] == []
        assert data["specialPreferences"] == []

        assert db.query(Profile).filter(Profile.user_id == test_user.id).count() == 1

    def test_out_of_range_flavor_skipped(self, auth_client: TestClient):
        auth_client.post(
            "/profile/preferences",
            json={"flavorPreferences": {"Sweet": 15, "Sour": 4}},
        )

        data = auth_client.get("/profile/preferences").json()
        assert data["flavorPreferences"] == {"Sour": 4}

    def test_omitted_category_untouched(self, auth_client: TestClient):
        auth_client.post("/profile/preferences", json={"allergies": ["Soy"]})
        auth_client.post("/profile/preferences", json={"specialPreferences": ["Mild only"]})

        data = auth_client.get("/profile/preferences").json()
        assert data["allergies"] == ["Soy"]
        assert data["specialPreferences"] == ["Mild only"]

    def test_empty_list_clears_category(self, auth_client: TestClient):
        auth_client.post("/profile/preferences", json={"allergies": ["Soy"]})
        auth_client.post("/profile/preferences", json={"allergies": []})

        assert auth_client.get("/profile/preferences").json()["allergies"] == []

    def test_wrong_types_rejected(self, auth_client: TestClient):
        response = auth_client.post(
            "/profile/preferences", json={"flavorPreferences": {"Sweet": "very"}}
        )

        assert response.status_code == 422


class TestFlavorPreference:
    """Tests for PUT /profile/preferences/flavors/{flavor_id}."""

    def test_set_flavor(self, auth_client: TestClient, db: Session):
        flavor = create_flavor(db, "Umami")

        response = auth_client.put(
            f"/profile/preferences/flavors/{flavor.id}", json={"preferenceLevel": 9}
        )

        assert response.status_code == 200
        assert response.json() == {"flavorId": flavor.id, "preferenceLevel": 9}
        assert auth_client.get("/profile/preferences").json()["flavorPreferences"] == {
            "Umami": 9
        }

    def test_out_of_range_is_400(self, auth_client: TestClient, db: Session):
        flavor = create_flavor(db, "Umami")

        response = auth_client.put(
            f"/profile/preferences/flavors/{flavor.id}", json={"preferenceLevel": 11}
        )

        assert response.status_code == 400
        assert "between 1 and 10" in response.json()["detail"]

    def test_missing_level_is_400(self, auth_client: TestClient, db: Session):
        flavor = create_flavor(db, "Umami")

        response = auth_client.put(f"/profile/preferences/flavors/{flavor.id}", json={})

        assert response.status_code == 400

    def test_unknown_flavor_is_404(self, auth_client: TestClient):
        response = auth_client.put(
            "/profile/preferences/flavors/999999", json={"preferenceLevel": 5}
        )

        assert response.status_code == 404


class TestPreferenceInputCleanup:
    """Null and blank names are skipped; overlong names are rejected."""

    def test_null_and_blank_entries_skipped(self, auth_client: TestClient):
        response = auth_client.post(
            "/profile/preferences",
            json={
                "allergies": ["Peanuts", None, "  "],
                "specialPreferences": [None, "No cilantro"],
            },
        )

        assert response.status_code == 200
        data = response.json()["preferences"]
        assert data["allergies"] == ["Peanuts"]
        assert data["specialPreferences"] == ["No cilantro"]

    def test_null_category_clears(self, auth_client: TestClient):
        auth_client.post("/profile/preferences", json={"allergies": ["Soy"]})

        response = auth_client.post(
            "/profile/preferences", json={"allergies": None, "flavorPreferences": None}
        )

        assert response.status_code == 200
        data = response.json()["preferences"]
        assert data["allergies"] == []
        assert data["flavorPreferences"] == {}

    def test_overlong_name_is_400(self, auth_client: TestClient):
        auth_client.post("/profile/preferences", json={"allergies": ["Soy"]})

        response = auth_client.post(
            "/profile/preferences",
            json={"allergies": ["Peanuts"], "dietaryConstraints": ["x" * 256]},
        )

        assert response.status_code == 400
        assert "at most 255 characters" in response.json()["detail"]
        assert auth_client.get("/profile/preferences").json()["allergies"] == ["Soy"]
