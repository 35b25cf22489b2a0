"""
Unit tests for ReferenceDataService.

Tests reference vocabularies, uniqueness validation and default seeding.
"""
import pytest
from sqlalchemy.orm import Session

from app.models import Allergy, ConstraintType, Flavor
from app.services.reference_data_service import (
    DEFAULT_DIETARY_CONSTRAINTS,
    DEFAULT_FLAVORS,
    get_or_create_by_name,
    reference_data_service,
)
from tests.factories import create_allergy, create_constraint_type


class TestCreate:
    """Tests for create_* uniqueness validation."""

    def test_create_allergy(self, db: Session):
        allergy = reference_data_service.create_allergy(db, "Sesame", "Seeds and oil")

        assert allergy.id is not None
        assert reference_data_service.get_allergy_by_name(db, "Sesame").id == allergy.id

    def test_duplicate_allergy(self, db: Session):
        create_allergy(db, "Sesame")

        with pytest.raises(ValueError, match="Allergy with name 'Sesame' already exists"):
            reference_data_service.create_allergy(db, "Sesame")

    def test_blank_flavor(self, db: Session):
        with pytest.raises(ValueError, match="name is required"):
            reference_data_service.create_flavor(db, "")

    def test_duplicate_constraint_type(self, db: Session):
        create_constraint_type(db, "Keto")

        with pytest.raises(ValueError, match="already exists"):
            reference_data_service.create_constraint_type(db, "Keto")

    def test_overlong_name(self, db: Session):
        with pytest.raises(ValueError, match="at most 255 characters"):
            reference_data_service.create_allergy(db, "a" * 256)

    def test_get_or_create_overlong_name(self, db: Session):
        with pytest.raises(ValueError, match="at most 255 characters"):
            get_or_create_by_name(db, Flavor, "f" * 256)

        assert db.query(Flavor).filter(Flavor.name == "f" * 256).count() == 0


class TestGetOrCreate:
    """Tests for get_or_create_by_name."""

    def test_returns_existing(self, db: Session):
        existing = create_allergy(db, "Soy")

        assert get_or_create_by_name(db, Allergy, "Soy").id == existing.id

    def test_creates_missing(self, db: Session):
        flavor = get_or_create_by_name(db, Flavor, "Smoky")

        assert flavor.id is not None
        assert db.query(Flavor).filter(Flavor.name == "Smoky").count() == 1


class TestDefaults:
    """Tests for default vocabulary seeding."""

    def test_common_dietary_constraints_seeded(self, db: Session):
        constraints = reference_data_service.get_common_dietary_constraints(db)

        names = {c.name for c in constraints}
        assert set(DEFAULT_DIETARY_CONSTRAINTS) <= names

    def test_seeding_is_idempotent(self, db: Session):
        reference_data_service.get_common_dietary_constraints(db)
        reference_data_service.get_common_dietary_constraints(db)

        count = (
            db.query(ConstraintType)
            .filter(ConstraintType.name.in_(DEFAULT_DIETARY_CONSTRAINTS))
            .count()
        )
        assert count == len(DEFAULT_DIETARY_CONSTRAINTS)

    def test_default_flavors(self, db: Session):
        flavors = reference_data_service.seed_default_flavors(db)

        assert set(DEFAULT_FLAVORS) <= {f.name for f in flavors}
        assert "Umami" in DEFAULT_FLAVORS

    def test_lists_are_ordered_by_name(self, db: Session):
        create_allergy(db, "Wheat")
        create_allergy(db, "Eggs")

        names = [a.name for a in reference_data_service.list_allergies(db)]

        assert names.index("Eggs") < names.index("Wheat")
