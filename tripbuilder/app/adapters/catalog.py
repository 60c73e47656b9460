"""Fixture-backed catalog repository."""

import json
from functools import lru_cache
from pathlib import Path

from tripbuilder.app.config import get_settings
from tripbuilder.app.models.catalog import CatalogSnapshot


def load_catalog(path: Path) -> CatalogSnapshot:
    """Load a catalog snapshot from a JSON fixture.

    Args:
        path: JSON file with hotels, sightseeings, activities, entry_tickets,
            meals and transportations arrays

    Returns:
        Validated, read-only CatalogSnapshot
    """
    with open(path) as f:
        data = json.load(f)
    return CatalogSnapshot.model_validate(data)


@lru_cache
def get_catalog() -> CatalogSnapshot:
    """Get the cached catalog configured in settings."""
    return load_catalog(get_settings().catalog_path)
