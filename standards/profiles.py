"""
standards/profiles.py

Named standards profiles loaded from configuration.

Profiles live in ``standards_profiles.json`` next to this module, installed
as package data, rather than in code.
Each entry either scales the base table::

    {"label": "BIS (Permissible)", "scale": 2.0}

or overrides individual limits (mg/L), merged over the base table::

    {"label": "Site X", "limits": {"Pb": 0.015}}

Both keys may be combined; ``limits`` are applied after ``scale``. When the
file is missing or unreadable the built-in defaults below are used.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Mapping

from standards.registry import InvalidStandard, StandardsProfile, base_standards, coerce_metal_key, scale

logger = logging.getLogger(__name__)

DEFAULT_PROFILES_PATH = Path(__file__).resolve().parent / "standards_profiles.json"

_BUILTIN_RULES: dict[str, Any] = {
    "default": "bis_acceptable",
    "profiles": {
        "bis_acceptable": {"label": "BIS (Acceptable)", "scale": 1.0},
        "bis_permissible": {"label": "BIS (Permissible)", "scale": 2.0},
        "who": {"label": "WHO", "scale": 1.0},
    },
}


class UnknownStandardsProfile(KeyError):
    """
    Raised when a profile name or label does not resolve.
    """

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(name)
        self.name = name
        self.available = available

    def __str__(self) -> str:
        return f"Unknown standards profile {self.name!r}. Available: {', '.join(self.available)}."


@dataclass(frozen=True)
class NamedProfile:
    """
    One configured profile: lookup key, display label and resolved limits.
    """

    key: str
    label: str
    profile: StandardsProfile


def _as_dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


def _read_rules(path: Path) -> dict:
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, ValueError, TypeError) as exc:
        logger.debug("Standards profiles not loaded from %s (%s); using built-in defaults.", path, exc)
        return _BUILTIN_RULES
    return data if isinstance(data, dict) else _BUILTIN_RULES


def _build_profile(key: str, entry: Mapping[str, Any]) -> NamedProfile:
    label = str(entry.get("label") or key)
    profile = base_standards()

    factor = entry.get("scale")
    if factor is not None:
        profile = scale(profile, factor, name=key)

    overrides = _as_dict(entry.get("limits"))
    if overrides:
        merged = dict(profile.limits)
        for symbol, value in overrides.items():
            try:
                metal = coerce_metal_key(symbol)
            except ValueError as exc:
                raise InvalidStandard(f"Profile {key!r}: {exc}", value=symbol) from None
            merged[metal] = value
        profile = StandardsProfile(name=key, limits=merged)

    if profile.name != key:
        profile = StandardsProfile(name=key, limits=profile.limits)

    return NamedProfile(key=key, label=label, profile=profile)


class StandardsProfileRegistry:
    """
    Immutable lookup of named profiles.

    Names resolve by key (``"bis_permissible"``) or display label
    (``"BIS (Permissible)"``), case-insensitively.
    """

    def __init__(self, profiles: list[NamedProfile], *, default: str) -> None:
        if not profiles:
            raise ValueError("At least one standards profile must be configured.")
        self._profiles: dict[str, NamedProfile] = {named.key: named for named in profiles}
        self._aliases: dict[str, str] = {}
        for named in profiles:
            self._aliases[named.key.strip().lower()] = named.key
            self._aliases.setdefault(named.label.strip().lower(), named.key)
        self._default_key = self._resolve_key(default)

    def __iter__(self) -> Iterator[NamedProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def names(self) -> list[str]:
        return list(self._profiles)

    def labels(self) -> list[str]:
        return [named.label for named in self._profiles.values()]

    def default(self) -> NamedProfile:
        return self._profiles[self._default_key]

    def get(self, name: str | None) -> NamedProfile:
        """
        Resolve *name* to a configured profile; ``None`` yields the default.
        """

        if name is None or not str(name).strip():
            return self.default()
        return self._profiles[self._resolve_key(name)]

    def _resolve_key(self, name: str) -> str:
        key = self._aliases.get(str(name).strip().lower())
        if key is None:
            raise UnknownStandardsProfile(str(name), self.names())
        return key


def load_profile_registry(path: str | Path | None = None) -> StandardsProfileRegistry:
    """
    Build a :class:`StandardsProfileRegistry` from the JSON rules file.

    Raises
    ------
    InvalidStandard
        When a configured limit or scale factor is not strictly positive.
    UnknownStandardsProfile
        When ``default`` does not name a configured profile.
    """

    rules = _read_rules(Path(path) if path is not None else DEFAULT_PROFILES_PATH)
    entries = _as_dict(rules.get("profiles")) or _BUILTIN_RULES["profiles"]

    profiles = [_build_profile(str(key), _as_dict(entry)) for key, entry in entries.items()]
    default = str(rules.get("default") or profiles[0].key)

    registry = StandardsProfileRegistry(profiles, default=default)
    logger.debug("Loaded %d standards profiles (default=%s)", len(registry), registry.default().key)
    return registry
