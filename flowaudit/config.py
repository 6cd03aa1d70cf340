# flowaudit/config.py
"""
Tunables for category validation.

Defaults reproduce the stock rule sets; a JSON or YAML file can override any
of them:

    strictness: high
    max_nodes: 80
    penalties:
      security: {penalty: 30, critical_penalty: 50}
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from flowaudit.utils.io import PathLike, load_any

STRICTNESS_LEVELS = ("low", "medium", "high")

CATEGORIES = ("naming", "security", "performance", "error_handling", "documentation")

CATEGORY_ALIASES = {
    "errorHandling": "error_handling",
    "error-handling": "error_handling",
}

# category -> (penalty per non-critical issue, penalty per critical point)
DEFAULT_PENALTIES: Dict[str, Tuple[int, int]] = {
    "naming": (20, 30),
    "security": (25, 40),
    "performance": (15, 25),
    "error_handling": (20, 30),
    "documentation": (15, 25),
}


def normalize_category(name: str) -> str:
    category = CATEGORY_ALIASES.get(name, name)
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category '{name}'. Choose from: {', '.join(CATEGORIES)}")
    return category


def check_strictness(level: str) -> str:
    if level not in STRICTNESS_LEVELS:
        raise ValueError(
            f"Invalid strictness '{level}'. Choose one of: {', '.join(STRICTNESS_LEVELS)}"
        )
    return level


@dataclass(frozen=True)
class AuditConfig:
    strictness: str = "medium"
    categories: Tuple[str, ...] = CATEGORIES
    penalties: Dict[str, Tuple[int, int]] = field(default_factory=lambda: dict(DEFAULT_PENALTIES))
    max_nodes: int = 50
    http_burst: int = 3
    doc_coverage_min: float = 0.5
    short_name_length: int = 5

    def penalty_for(self, category: str) -> Tuple[int, int]:
        return self.penalties.get(category, DEFAULT_PENALTIES[category])

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AuditConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        values = dict(data)
        if "strictness" in values:
            check_strictness(values["strictness"])
        if "categories" in values:
            values["categories"] = tuple(normalize_category(c) for c in values["categories"])
        if "penalties" in values:
            penalties = dict(DEFAULT_PENALTIES)
            for name, override in (values["penalties"] or {}).items():
                category = normalize_category(name)
                base, crit = penalties[category]
                if isinstance(override, Mapping):
                    penalties[category] = (
                        int(override.get("penalty", base)),
                        int(override.get("critical_penalty", crit)),
                    )
                else:
                    penalties[category] = (int(override[0]), int(override[1]))
            values["penalties"] = penalties
        return replace(cls(), **values)


DEFAULT_CONFIG = AuditConfig()


def load_config(path: Optional[PathLike]) -> AuditConfig:
    """Load an AuditConfig from a .json/.yaml file; None gives the defaults."""
    if path is None:
        return DEFAULT_CONFIG
    data = load_any(path)
    if not isinstance(data, Mapping):
        raise ValueError(f"Config file {path} must contain a mapping")
    return AuditConfig.from_mapping(data)
