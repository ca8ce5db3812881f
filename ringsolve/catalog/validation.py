"""
Catalog Validation - Parsing and schema validation for attack catalogs.

Validates that:
1. Required fields are present and well-typed
2. Weapon and tool names are known
3. Every shape fits on the arena (rings 1-4, fewer than 12 columns wide)
4. Invariants hold (e.g., 1 <= min_count <= size, unique names)
"""

from __future__ import annotations
from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any

from ..engine_core.state import COLUMNS, RINGS, Tool, Weapon
from ..errors import RingSolveError, UnknownTool
from .shapes import AttackShape, Catalog

logger = logging.getLogger(__name__)


class CatalogValidationError(RingSolveError):
    """Raised when catalog validation fails."""
    code: str = "INVALID_CATALOG"

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Catalog validation failed with {len(errors)} error(s)",
            context={"errors": errors},
        )


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: Catalog) -> ValidationResult:
    """
    Validate a parsed catalog.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    names: set[str] = set()
    for shape in catalog.shapes:
        if shape.name in names:
            errors.append(f"Duplicate shape name '{shape.name}'")
        names.add(shape.name)
        errors.extend(_validate_shape(shape))

    if not catalog.shapes:
        warnings.append("Catalog has no shapes - only empty arenas can be cleared")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_shape(shape: AttackShape) -> list[str]:
    """Validate a single shape."""
    errors = []
    label = shape.name or "<unnamed>"

    if not shape.name:
        errors.append("Shape has empty name")
    if not shape.cells:
        errors.append(f"Shape '{label}' has no cells")
        return errors

    rings = [dr for dr, _ in shape.cells]
    columns = [dc for _, dc in shape.cells]
    if shape.ring_anchored:
        if min(rings) < 0 or max(rings) >= RINGS:
            errors.append(
                f"Shape '{label}' is ring-anchored but uses ring offsets outside 0..{RINGS - 1}"
            )
    elif max(rings) - min(rings) >= RINGS:
        errors.append(f"Shape '{label}' spans more than {RINGS} rings")

    if max(columns) - min(columns) >= COLUMNS:
        errors.append(f"Shape '{label}' spans {COLUMNS} or more columns")

    if shape.min_count is not None and not 1 <= shape.min_count <= shape.size:
        errors.append(
            f"Shape '{label}' has min_count {shape.min_count}, expected 1..{shape.size}"
        )

    return errors


def _is_int(value: Any) -> bool:
    """JSON integers only; booleans are ints to Python but not offsets."""
    return isinstance(value, int) and not isinstance(value, bool)


def shape_from_dict(data: dict[str, Any]) -> AttackShape:
    """
    Parse one shape entry.

    Raises CatalogValidationError on malformed fields.
    """
    if not isinstance(data, dict):
        raise CatalogValidationError([f"Shape entry {data!r} is not an object"])

    errors = []
    name = data.get("name", "")
    if not isinstance(name, str):
        errors.append(f"Shape name {name!r} is not a string")
        name = str(name)

    cells = set()
    raw_cells = data.get("cells", [])
    if not isinstance(raw_cells, list):
        errors.append(f"Shape '{name}': cells must be a list of [ring, column] pairs")
        raw_cells = []
    for raw in raw_cells:
        if (
            not isinstance(raw, (list, tuple))
            or len(raw) != 2
            or not all(_is_int(v) for v in raw)
        ):
            errors.append(f"Shape '{name}': cell {raw!r} is not a [ring, column] pair")
            continue
        cells.add((raw[0], raw[1]))

    weapon = None
    raw_weapon = data.get("weapon")
    if raw_weapon not in (None, "any"):
        try:
            weapon = Weapon(raw_weapon)
        except (ValueError, TypeError):
            errors.append(f"Shape '{name}': unknown weapon '{raw_weapon}'")

    tool = None
    raw_tool = data.get("tool")
    if isinstance(raw_tool, str):
        try:
            tool = Tool.from_name(raw_tool)
        except UnknownTool as e:
            errors.append(f"Shape '{name}': {e.message}")
    elif raw_tool is not None:
        errors.append(f"Shape '{name}': tool {raw_tool!r} is not a name")

    min_count = data.get("min_count")
    if min_count is not None and not _is_int(min_count):
        errors.append(f"Shape '{name}': min_count must be an integer")
        min_count = None

    description = data.get("description", "")
    if not isinstance(description, str):
        errors.append(f"Shape '{name}': description must be a string")

    if errors:
        raise CatalogValidationError(errors)

    return AttackShape(
        name=name,
        cells=frozenset(cells),
        weapon=weapon,
        tool=tool,
        min_count=min_count,
        ring_anchored=bool(data.get("ring_anchored", False)),
        description=description,
    )


def catalog_from_dict(data: dict[str, Any]) -> Catalog:
    """
    Parse and validate a catalog.

    Raises CatalogValidationError if parsing or validation fails.
    """
    if not isinstance(data, dict):
        raise CatalogValidationError(["Catalog must be a JSON object with a 'shapes' list"])
    raw_shapes = data.get("shapes")
    if not isinstance(raw_shapes, list):
        raise CatalogValidationError(["Catalog needs a 'shapes' list"])

    errors: list[str] = []
    shapes = []
    for raw in raw_shapes:
        try:
            shapes.append(shape_from_dict(raw))
        except CatalogValidationError as e:
            errors.extend(e.errors)
    if errors:
        raise CatalogValidationError(errors)

    catalog = Catalog(shapes=tuple(shapes), name=str(data.get("name", "custom")))
    result = validate_catalog(catalog)
    for warning in result.warnings:
        logger.warning(f"Catalog '{catalog.name}': {warning}")
    if not result.valid:
        raise CatalogValidationError(result.errors)
    return catalog


def load_catalog(path: str | Path) -> Catalog:
    """Load a catalog from a JSON file."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogValidationError([f"{path}: invalid JSON ({e})"])
    catalog = catalog_from_dict(data)
    logger.info(f"Loaded catalog '{catalog.name}' with {len(catalog)} shape(s) from {path}")
    return catalog
