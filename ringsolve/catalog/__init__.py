"""Attack catalog - configurable shapes that one attack can clear."""

from .shapes import AttackShape, Catalog, Placement
from .validation import (
    CatalogValidationError,
    ValidationResult,
    catalog_from_dict,
    load_catalog,
    validate_catalog,
)
from .defaults import DEFAULT_CATALOG_DATA, default_catalog

__all__ = [
    "AttackShape",
    "Catalog",
    "Placement",
    "CatalogValidationError",
    "ValidationResult",
    "catalog_from_dict",
    "load_catalog",
    "validate_catalog",
    "DEFAULT_CATALOG_DATA",
    "default_catalog",
]
