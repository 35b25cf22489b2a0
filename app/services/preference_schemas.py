"""
Pydantic models for preference documents and classifier output.

PreferenceDocument is the one typed shape exchanged between the API boundary,
the reconciler, the aggregator and the recommendation orchestrator. Wire names
are camelCase; Python attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Used when a caller supplies no flavor profile at all
DEFAULT_FLAVOR_PROFILE: dict[str, int] = {
    "sweet": 7,
    "salty": 5,
    "sour": 6,
    "bitter": 3,
    "umami": 8,
    "spicy": 4,
    "savory": 9,
}


# --- Preference document (API boundary, aggregator, reconciler) ---


class PreferenceDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    allergies: list[str] = Field(default_factory=list)
    dietary_constraints: list[str] = Field(
        default_factory=list, alias="dietaryConstraints"
    )
    # Levels are not range-checked here; see PreferenceService.process_flavor_preferences
    flavor_preferences: dict[str, int] = Field(
        default_factory=dict, alias="flavorPreferences"
    )
    specific_dishes: list[str] = Field(default_factory=list, alias="specificDishes")
    special_preferences: list[str] = Field(
        default_factory=list, alias="specialPreferences"
    )
    dish_history: dict[str, int] = Field(default_factory=dict, alias="dishHistory")

    @field_validator(
        "allergies",
        "dietary_constraints",
        "specific_dishes",
        "special_preferences",
        mode="before",
    )
    @classmethod
    def drop_null_names(cls, value):
        # A null category clears it; null entries are skipped like blank ones
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if item is not None]
        return value

    @field_validator("flavor_preferences", "dish_history", mode="before")
    @classmethod
    def null_map_as_empty(cls, value):
        return {} if value is None else value

    def to_response(self) -> dict:
        """Serialize the five aggregated categories with their wire names."""
        return self.model_dump(by_alias=True, exclude={"dish_history"})

    def to_classification_preferences(self) -> "ClassificationPreferences":
        return ClassificationPreferences(
            flavor_profile=dict(self.flavor_preferences),
            allergies=list(self.allergies),
            constraints=list(self.dietary_constraints),
            special_preferences=list(self.special_preferences),
        )


# --- Classifier input ---


class ClassificationPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    flavor_profile: dict[str, int] = Field(
        default_factory=dict, alias="flavorProfile"
    )
    allergies: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    special_preferences: list[str] = Field(
        default_factory=list, alias="specialPreferences"
    )

    def effective_flavor_profile(self) -> dict[str, int]:
        """The caller's flavor profile, or the default profile when empty."""
        if not self.flavor_profile:
            return dict(DEFAULT_FLAVOR_PROFILE)
        return dict(self.flavor_profile)


# --- Classifier output (classify_dishes) ---


class TrafficLightSchema(BaseModel):
    green: list[str] = Field(default_factory=list)
    orange: list[str] = Field(default_factory=list)
    red: list[str] = Field(default_factory=list)
