"""Input events consumed one at a time by the browser session."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KeyInput:
    key: str
    character: str | None = None

    @classmethod
    def char(cls, character: str) -> KeyInput:
        return cls(key=character, character=character)


@dataclass(frozen=True)
class Tick:
    pass


Event = KeyInput | Tick
