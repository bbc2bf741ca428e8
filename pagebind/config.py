# pagebind/config.py
"""
@file config.py
@brief Builder settings shared by the compiler, the locator map and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .exceptions import ConfigError

AMBIGUITY_POLICIES = ("warn", "error", "first")


@dataclass(frozen=True)
class BuilderSettings:
    """
    Compiler policy switches.

    allow_empty_constructor: None defers to the back end's hooks.
    ambiguous_constructors: what to do when two constructors of the same
        maximal parameter count both bind ("warn", "error" or "first").
    log_plans: log every compiled plan at DEBUG level.
    """
    allow_empty_constructor: Optional[bool] = None
    ambiguous_constructors: str = "warn"
    log_plans: bool = False

    def __post_init__(self) -> None:
        if self.ambiguous_constructors not in AMBIGUITY_POLICIES:
            raise ConfigError(
                f"ambiguous_constructors must be one of {list(AMBIGUITY_POLICIES)}, "
                f"got: {self.ambiguous_constructors!r}"
            )

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> BuilderSettings:
        d = d or {}
        if not isinstance(d, dict):
            raise ConfigError("'builder' must be a mapping")
        unknown = set(d) - {"allow_empty_constructor", "ambiguous_constructors", "log_plans"}
        if unknown:
            raise ConfigError(f"builder: unknown keys: {sorted(unknown)}")
        allow_empty = d.get("allow_empty_constructor")
        return cls(
            allow_empty_constructor=None if allow_empty is None else bool(allow_empty),
            ambiguous_constructors=str(d.get("ambiguous_constructors", "warn")),
            log_plans=bool(d.get("log_plans", False)),
        )

    def with_overrides(self, **overrides: Any) -> BuilderSettings:
        """Create a new settings instance with non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allow_empty_constructor": self.allow_empty_constructor,
            "ambiguous_constructors": self.ambiguous_constructors,
            "log_plans": self.log_plans,
        }
