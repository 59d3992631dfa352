"""
Static recipe catalog for offline meal planning
"""

import json
from importlib import resources
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

import structlog

from .models import RecipeEntry

logger = structlog.get_logger(__name__)

DEFAULT_CATALOG = "recipes.json"


class RecipeCatalog:
    """Read-only collection of recipes, loaded once per process"""

    def __init__(self, entries: Iterable[RecipeEntry]):
        self._entries: Tuple[RecipeEntry, ...] = tuple(entries)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "RecipeCatalog":
        """Load a catalog from a JSON file, or the bundled one"""
        if path is None:
            raw = (resources.files("planner") / "data" / DEFAULT_CATALOG).read_text(encoding="utf-8")
            source = DEFAULT_CATALOG
        else:
            raw = Path(path).read_text(encoding="utf-8")
            source = str(path)

        catalog = cls.from_records(json.loads(raw))
        logger.info("Recipe catalog loaded", source=source, recipes=len(catalog))
        return catalog

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "RecipeCatalog":
        return cls(RecipeEntry.model_validate(record) for record in records)

    @property
    def entries(self) -> Tuple[RecipeEntry, ...]:
        return self._entries

    def __iter__(self) -> Iterator[RecipeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
