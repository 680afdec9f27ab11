import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, get_args

import yaml

from analysis.models import ClauseCategory


DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "risk_categories.yaml"

EXPECTED_LABELS = set(get_args(ClauseCategory))

DEFAULT_CATEGORY_ICON = "📋"


def _fold(value: str) -> str:
    """Lowercase and drop everything but letters and digits."""
    return re.sub(r"[^a-z0-9]", "", str(value).lower())


class CategoryRules:
    """
    Loads and validates the canonical clause-category table.

    The table drives the prompt's category list, alias resolution for the
    service's category strings, and the trigger phrases used to ground
    snippets.

    Example:
        >>> rules = CategoryRules(DEFAULT_RULES_PATH)
        >>> rules.canonical_label("arbitration")
        'Arbitration / No Class Action'
    """

    def __init__(self, rules_path: Path = DEFAULT_RULES_PATH):
        if not rules_path.exists():
            raise FileNotFoundError(f"Category rules file not found: {rules_path}")

        with open(rules_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)

        if not raw or not raw.get("categories"):
            raise ValueError("Category rules YAML is empty or invalid")

        self._entries: Dict[str, Dict] = {}
        self._lookup: Dict[str, str] = {}

        for entry in raw["categories"]:
            label = entry.get("label")
            if label not in EXPECTED_LABELS:
                raise ValueError(f"Unknown category label in rules: {label!r}")
            if label in self._entries:
                raise ValueError(f"Duplicate category label in rules: {label!r}")

            triggers = [t.lower() for t in entry.get("triggers") or []]
            if not triggers:
                raise ValueError(f"Category {label!r} has no trigger phrases")

            self._entries[label] = {
                "key": entry.get("key", _fold(label)),
                "icon": entry.get("icon", DEFAULT_CATEGORY_ICON),
                "description": entry.get("description", ""),
                "triggers": triggers,
            }

            for name in [label, entry.get("key", "")] + list(entry.get("aliases") or []):
                if name:
                    self._lookup.setdefault(_fold(name), label)

        missing = EXPECTED_LABELS - set(self._entries)
        if missing:
            raise ValueError(f"Category rules missing labels: {sorted(missing)}")

    # -------------------------------------------------
    # Public API
    # -------------------------------------------------

    @property
    def labels(self) -> List[str]:
        """Category labels in table order."""
        return list(self._entries)

    def triggers_for(self, label: str) -> List[str]:
        entry = self._entries.get(label)
        return list(entry["triggers"]) if entry else []

    def icon_for(self, label: str) -> str:
        entry = self._entries.get(label)
        return entry["icon"] if entry else DEFAULT_CATEGORY_ICON

    def description_for(self, label: str) -> str:
        entry = self._entries.get(label)
        return entry["description"] if entry else ""

    def canonical_label(self, raw: Optional[str]) -> Optional[str]:
        """
        Map a category string from the service onto a canonical label.

        Matching ignores case, spacing and punctuation. Returns None when
        nothing matches.
        """
        if not raw:
            return None
        return self._lookup.get(_fold(raw))

    def find_mentions(self, text: str) -> List[str]:
        """
        Labels whose name or any trigger phrase occurs in text.
        """
        haystack = (text or "").lower()
        found = []
        for label, entry in self._entries.items():
            if label.lower() in haystack or any(t in haystack for t in entry["triggers"]):
                found.append(label)
        return found


@lru_cache(maxsize=1)
def load_category_rules() -> CategoryRules:
    return CategoryRules(DEFAULT_RULES_PATH)
