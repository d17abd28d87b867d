"""Persisted last-selected project / release / feature ids."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_FIELDS = ("project", "release", "feature")


class BreadcrumbError(OSError):
    pass


@dataclass(frozen=True)
class Breadcrumb:
    project: str | None = None
    release: str | None = None
    feature: str | None = None

    def with_field(self, name: str, value: str) -> Breadcrumb:
        if name not in _FIELDS:
            raise ValueError(f"Unknown breadcrumb field: {name}")
        return replace(self, **{name: value})


class BreadcrumbStore:
    """Whole-file YAML store; a missing file reads as an empty breadcrumb."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Breadcrumb | None:
        if not self.path.exists():
            return None
        try:
            loaded = yaml.safe_load(self.path.read_text())
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Ignoring unreadable breadcrumb %s: %s", self.path, exc)
            return None
        if not isinstance(loaded, dict):
            return None
        values = {
            name: str(loaded[name]) for name in _FIELDS if loaded.get(name) not in (None, "")
        }
        return Breadcrumb(**values)

    def save(self, breadcrumb: Breadcrumb) -> None:
        data = {name: value for name, value in asdict(breadcrumb).items() if value is not None}
        try:
            self.path.write_text(yaml.safe_dump(data, sort_keys=True))
        except OSError as exc:
            raise BreadcrumbError(f"couldn't write {self.path}: {exc}") from exc
