"""Pytest configuration and fixtures for Bindery tests."""

import pytest

from bindery import Environment


@pytest.fixture
def env():
    """Create a basic Bindery Environment."""
    return Environment()


@pytest.fixture
def env_strict():
    """Create an Environment with strict mode enabled."""
    return Environment(strict=True)


@pytest.fixture
def env_escape():
    """Create an Environment with HTML escaping enabled."""
    return Environment(escape_html=True)


@pytest.fixture
def order_data():
    """Nested data resembling an order confirmation component."""
    return {
        "title": "Order confirmation",
        "customer": {"name": "Ada Lovelace", "email": "ada@example.com", "vip": True},
        "items": [
            {"name": "Notebook", "price": 12.5, "qty": 2},
            {"name": "Pen", "price": 1.25, "qty": 10},
        ],
        "tags": ["new", "paper"],
        "total": 37.5,
        "coupon": None,
    }


def assert_contains(output: str, *expected_parts: str) -> None:
    """Assert rendered output contains all expected parts.

    Args:
        output: The rendered output.
        expected_parts: Strings that should all be present in the output.
    """
    for part in expected_parts:
        assert part in output, (
            f"Output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {output!r}"
        )
