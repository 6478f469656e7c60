import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import Category

logger = logging.getLogger(__name__)


class NameCorpus:
    """Local list of candidate secret names keyed by category."""

    def __init__(self, names_by_category: Dict[str, List[str]]):
        self.names_by_category = {
            category: [name.strip() for name in names if isinstance(name, str) and name.strip()]
            for category, names in names_by_category.items()
        }

    @classmethod
    def load(cls, path: Union[str, Path]) -> Optional["NameCorpus"]:
        """Load a corpus from a JSON file, or return None if it is missing or invalid."""
        path = Path(path)
        if not path.exists():
            logger.warning(f"Name corpus not found at {path}, names will come from the AI")
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read name corpus {path}: {e}")
            return None

        if not cls._validate_data(data, path):
            return None

        corpus = cls(data)
        logger.info(f"Loaded name corpus with {corpus.size()} names in {len(corpus.names_by_category)} categories")
        return corpus

    @staticmethod
    def _validate_data(data, path: Path) -> bool:
        """Validate that the corpus maps category names to lists of names."""
        if not isinstance(data, dict) or not data:
            logger.error(f"Name corpus {path} must be a non-empty JSON object")
            return False

        bad_keys = [k for k, v in data.items() if not isinstance(v, list)]
        if bad_keys:
            logger.error(f"Name corpus {path} has non-list entries for: {bad_keys}")
            return False

        unknown = [k for k in data if k not in {c.value for c in Category}]
        if unknown:
            logger.warning(f"Name corpus {path} has unknown categories: {unknown}")
        return True

    def size(self) -> int:
        return sum(len(names) for names in self.names_by_category.values())

    def candidates(self, category: Category, exclude: Optional[str] = None) -> List[str]:
        """Names for the category (all categories for ``any``), minus ``exclude``."""
        if category == Category.ANY:
            names: List[str] = []
            for category_names in self.names_by_category.values():
                names.extend(category_names)
        else:
            names = list(self.names_by_category.get(category.value, []))

        if exclude:
            names = [n for n in names if n != exclude]
        return names
