"""Key bindings for the browser, overridable from the config `layout` table."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

_ALIASES = {
    "esc": "escape",
    "\n": "enter",
    "return": "enter",
    "none": "",
}


def normalize_key(name: str) -> str:
    value = name if len(name) == 1 else name.strip().lower()
    return _ALIASES.get(value, value)


@dataclass(frozen=True)
class KeyLayout:
    up: str = "k"
    up_arrow: str = "up"
    down: str = "j"
    down_arrow: str = "down"
    left: str = "h"
    left_arrow: str = "left"
    right: str = "l"
    right_arrow: str = "right"
    right_alt: str = "enter"
    escape: str = "escape"
    quit: str = "q"
    search: str = "s"
    create: str = "c"

    @classmethod
    def from_config(cls, layout: dict[str, str] | None) -> KeyLayout:
        known = {f.name for f in fields(cls)}
        overrides = {
            name: normalize_key(str(value))
            for name, value in (layout or {}).items()
            if name in known and value is not None
        }
        return replace(cls(), **overrides)

    def is_up(self, key: str) -> bool:
        return key in (self.up, self.up_arrow)

    def is_down(self, key: str) -> bool:
        return key in (self.down, self.down_arrow)

    def is_back(self, key: str) -> bool:
        return key in (self.left, self.left_arrow)

    def is_enter(self, key: str) -> bool:
        return key in (self.right, self.right_arrow, self.right_alt)
