"""Test fixtures for EatsAdvisor."""

from tests.fixtures.mocks import (
    DEFAULT_CLASSIFICATION,
    DEFAULT_MENU_ITEMS,
    MockAIService,
)

__all__ = [
    "DEFAULT_CLASSIFICATION",
    "DEFAULT_MENU_ITEMS",
    "MockAIService",
]
