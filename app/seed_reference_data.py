"""Seed the default dietary-constraint and flavor vocabularies."""
from app.database import SessionLocal
from app.services.reference_data_service import reference_data_service


def seed_reference_data():
    """Create any missing default constraint types and flavors. Safe to re-run."""
    db = SessionLocal()

    try:
        constraints = reference_data_service.get_common_dietary_constraints(db)
        flavors = reference_data_service.seed_default_flavors(db)
        print(
            f"Reference data ready: {len(constraints)} constraint types, "
            f"{len(flavors)} flavors."
        )
    finally:
        db.close()


if __name__ == "__main__":
    seed_reference_data()
