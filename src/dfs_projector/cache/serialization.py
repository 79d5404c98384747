"""Serializers turning provider results into cache strings and back.

Usage:
    serializer = DataclassSerializer(PlayerIdentity, converters=HANDEDNESS_FIELDS)
    cached_str = serializer.serialize(identity)
    identity = serializer.deserialize(cached_str)
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import TYPE_CHECKING, Any, Protocol

from dfs_projector.domain.game import GameContext, LineupEntry, TeamRef
from dfs_projector.domain.player import Handedness

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

HANDEDNESS_FIELDS: dict[str, Callable[[Any], Any]] = {"bats": Handedness.parse, "throws": Handedness.parse}


class Serializer[T](Protocol):
    def serialize(self, value: T) -> str: ...

    def deserialize(self, data: str) -> T: ...


class DataclassSerializer[T]:
    """JSON serializer for one flat frozen dataclass.

    ``converters`` restores fields JSON cannot round-trip on its own, such as
    enums, keyed by field name.
    """

    def __init__(self, dataclass_type: type[T], *, converters: Mapping[str, Callable[[Any], Any]] | None = None) -> None:
        if not is_dataclass(dataclass_type):
            raise TypeError(f"{dataclass_type} is not a dataclass")
        self._dataclass_type = dataclass_type
        self._converters = dict(converters or {})

    def to_dict(self, value: T) -> dict[str, Any]:
        return asdict(value)  # type: ignore[call-overload]

    def from_dict(self, data: dict[str, Any]) -> T:
        for name, convert in self._converters.items():
            if name in data:
                data[name] = convert(data[name])
        return self._dataclass_type(**data)

    def serialize(self, value: T) -> str:
        return json.dumps(self.to_dict(value))

    def deserialize(self, data: str) -> T:
        return self.from_dict(json.loads(data))


class DataclassTupleSerializer[T]:
    """Serializer for a tuple of dataclasses, e.g. a batter's season history."""

    def __init__(self, item: DataclassSerializer[T]) -> None:
        self._item = item

    def serialize(self, value: tuple[T, ...]) -> str:
        return json.dumps([self._item.to_dict(v) for v in value])

    def deserialize(self, data: str) -> tuple[T, ...]:
        return tuple(self._item.from_dict(raw) for raw in json.loads(data))


def _entry(raw: dict[str, Any] | None) -> LineupEntry | None:
    if raw is None:
        return None
    return LineupEntry(**raw)


def _game(raw: dict[str, Any]) -> GameContext:
    return GameContext(
        game_pk=raw["game_pk"],
        game_date=raw["game_date"],
        venue_id=raw["venue_id"],
        venue_name=raw["venue_name"],
        home_team=TeamRef(**raw["home_team"]),
        away_team=TeamRef(**raw["away_team"]),
        home_pitcher=_entry(raw.get("home_pitcher")),
        away_pitcher=_entry(raw.get("away_pitcher")),
        home_lineup=tuple(LineupEntry(**e) for e in raw.get("home_lineup", [])),
        away_lineup=tuple(LineupEntry(**e) for e in raw.get("away_lineup", [])),
    )


class GameListSerializer:
    """Serializer for a day's schedule with nested teams, starters and lineups."""

    def serialize(self, value: list[GameContext]) -> str:
        return json.dumps([asdict(game) for game in value])

    def deserialize(self, data: str) -> list[GameContext]:
        return [_game(raw) for raw in json.loads(data)]
