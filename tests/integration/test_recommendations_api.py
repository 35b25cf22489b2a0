"""
Integration tests for Recommendations API.

Tests the recommendation flow including:
- Guest and authenticated generation
- Rating validation and authentication order
- Dish history and reference vocabularies
"""
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models import AppUser, DishHistory
from app.services.preference_schemas import PreferenceDocument
from app.services.preference_service import preference_service
from tests.factories import create_allergy, create_dish


class TestGenerate:
    """Tests for POST /api/recommendations/generate."""

    def test_menu_text_required(self, client: TestClient, mock_ai_service):
        response = client.post("/api/recommendations/generate", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Menu text is required"

    def test_guest_generation(self, client: TestClient, mock_ai_service):
        response = client.post(
            "/api/recommendations/generate",
            json={
                "menuText": "Margherita Pizza - $12.50",
                "preferences": {"allergies": ["Peanuts"], "flavorPreferences": {"Sweet": 9}},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert "Mains" in data["classification"]
        assert data["dishes"] == []

        preferences = mock_ai_service.calls["classify_dishes"][0]["kwargs"]["preferences"]
        assert preferences.allergies == ["Peanuts"]
        assert preferences.flavor_profile == {"Sweet": 9}

    def test_authenticated_generation_uses_profile(
        self, auth_client: TestClient, db: Session, test_user: AppUser, mock_ai_service
    ):
        preference_service.set_user_preferences(
            db, test_user.email, PreferenceDocument(dietary_constraints=["Vegan"])
        )

        response = auth_client.post(
            "/api/recommendations/generate",
            json={"menuText": "Tofu Stir Fry - $11\nBeef Burger - $13"},
        )

        assert response.status_code == 200
        names = [d["name"] for d in response.json()["dishes"]]
        assert names == ["Tofu Stir Fry", "Beef Burger"]
        preferences = mock_ai_service.calls["classify_dishes"][0]["kwargs"]["preferences"]
        assert preferences.constraints == ["Vegan"]

    def test_classifier_error_document_returned(self, client: TestClient, mock_ai_service):
        mock_ai_service.set_classify_dishes_response({"error": "Invalid JSON response."})

        response = client.post(
            "/api/recommendations/generate", json={"menuText": "Soup - $4"}
        )

        assert response.status_code == 200
        assert response.json()["classification"] == {"error": "Invalid JSON response."}

    def test_unexpected_failure_is_500(self, client: TestClient, mock_ai_service):
        mock_ai_service.set_error(RuntimeError("boom"))

        response = client.post(
            "/api/recommendations/generate", json={"menuText": "Soup - $4"}
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate recommendations: boom"


class TestRate:
    """Tests for POST /api/recommendations/rate."""

    def test_rating_out_of_range(self, auth_client: TestClient):
        response = auth_client.post(
            "/api/recommendations/rate", json={"dishId": 42, "rating": 6}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Rating must be between 1 and 5"

    def test_dish_id_required(self, auth_client: TestClient):
        response = auth_client.post("/api/recommendations/rate", json={"rating": 4})

        assert response.status_code == 400
        assert response.json()["detail"] == "Dish ID is required"

    def test_requires_authentication(self, client: TestClient):
        response = client.post(
            "/api/recommendations/rate", json={"dishId": 42, "rating": 4}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    def test_unknown_dish(self, auth_client: TestClient):
        response = auth_client.post(
            "/api/recommendations/rate", json={"dishId": 999999, "rating": 4}
        )

        assert response.status_code == 404

    def test_rate_twice_upserts(self, auth_client: TestClient, db: Session):
        dish = create_dish(db, "Pho")

        first = auth_client.post(
            "/api/recommendations/rate", json={"dishId": dish.id, "rating": 2}
        )
        second = auth_client.post(
            "/api/recommendations/rate", json={"dishId": dish.id, "rating": 5}
        )

        assert first.status_code == 200
        assert second.json() == {"success": True, "message": "Rating saved successfully"}
        rows = db.query(DishHistory).filter(DishHistory.dish_id == dish.id).all()
        assert [r.user_rating for r in rows] == [5]


class TestHistory:
    """Tests for GET /api/recommendations/history."""

    def test_requires_authentication(self, client: TestClient):
        assert client.get("/api/recommendations/history").status_code == 401

    def test_history_after_rating(self, auth_client: TestClient, db: Session):
        dish = create_dish(db, "Pho")
        auth_client.post("/api/recommendations/rate", json={"dishId": dish.id, "rating": 4})

        response = auth_client.get("/api/recommendations/history")

        assert response.status_code == 200
        history = response.json()
        assert [(h["dishName"], h["rating"]) for h in history] == [("Pho", 4)]


class TestReferenceVocabularies:
    """Tests for the picker endpoints."""

    def test_allergies(self, client: TestClient, db: Session):
        create_allergy(db, "Sesame")

        response = client.get("/api/recommendations/allergies")

        assert response.status_code == 200
        assert "Sesame" in [a["name"] for a in response.json()]

    def test_constraints_seeded(self, client: TestClient):
        response = client.get("/api/recommendations/constraints")

        names = [c["name"] for c in response.json()]
        assert "Gluten-Free" in names
        assert "Halal" in names

    def test_flavors(self, client: TestClient):
        response = client.get("/api/recommendations/flavors")

        assert response.status_code == 200
        assert isinstance(response.json(), list)
