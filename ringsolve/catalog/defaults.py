"""
Default Catalog - The arena attacks as the game plays them.

- Jump along a full column (rings 1-4)
- Iron boots jump along a full column (needs iron boots)
- Throw the hammer along a full column (needs the throwing hammer)
- Hammer a 2x2 block on the two inner rings

Groups may be partial: an attack clears whatever stands in its area.
"""

from __future__ import annotations

from .shapes import Catalog
from .validation import catalog_from_dict

_FULL_COLUMN = [[0, 0], [1, 0], [2, 0], [3, 0]]
_INNER_BLOCK = [[0, 0], [0, 1], [1, 0], [1, 1]]

DEFAULT_CATALOG_DATA = {
    "name": "default",
    "shapes": [
        {
            "name": "jump_line",
            "cells": _FULL_COLUMN,
            "weapon": "jump",
            "tool": None,
            "min_count": 1,
            "ring_anchored": True,
            "description": "Jump along one column from the inner to the outer ring",
        },
        {
            "name": "boots_line",
            "cells": _FULL_COLUMN,
            "weapon": "iron_boots",
            "tool": "iron_boots",
            "min_count": 1,
            "ring_anchored": True,
            "description": "Iron boots jump along one column",
        },
        {
            "name": "hammer_throw_line",
            "cells": _FULL_COLUMN,
            "weapon": "hammer",
            "tool": "hammer",
            "min_count": 1,
            "ring_anchored": True,
            "description": "Throw the hammer along one column",
        },
        {
            "name": "hammer_block",
            "cells": _INNER_BLOCK,
            "weapon": "hammer",
            "tool": None,
            "min_count": 1,
            "ring_anchored": True,
            "description": "Hammer a 2x2 block on the two inner rings",
        },
    ],
}


def default_catalog() -> Catalog:
    """Build the default catalog (validated like any loaded catalog)."""
    return catalog_from_dict(DEFAULT_CATALOG_DATA)
