"""Projection parameters.

A ``ProjectionParameterSet`` is ordered, name-unique and immutable. Names are
compared case-insensitively with spaces folded to underscores, so
``"Central Meridian"`` and ``"central_meridian"`` address the same entry.
The WKT reader accumulates parameters with ``ParameterSetBuilder`` and
freezes them once the enclosing clause is complete.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import MissingParameterError


def normalize_name(name: str) -> str:
    return name.strip().lower().replace(" ", "_")


@dataclass(frozen=True)
class ProjectionParameter:
    name: str
    value: float


class ProjectionParameterSet:
    __slots__ = ("_items", "_index")

    def __init__(self, parameters: Iterable[ProjectionParameter] = ()):
        items: List[ProjectionParameter] = []
        index: Dict[str, int] = {}
        for p in parameters:
            key = normalize_name(p.name)
            if key in index:
                raise ValueError(f"Duplicate projection parameter {p.name!r}")
            index[key] = len(items)
            items.append(ProjectionParameter(p.name, float(p.value)))
        self._items: Tuple[ProjectionParameter, ...] = tuple(items)
        self._index = index

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, float]]) -> "ProjectionParameterSet":
        return cls(ProjectionParameter(n, v) for n, v in pairs)

    def __iter__(self) -> Iterator[ProjectionParameter]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._index

    def __getitem__(self, index: int) -> ProjectionParameter:
        return self._items[index]

    def find(self, name: str) -> Optional[ProjectionParameter]:
        i = self._index.get(normalize_name(name))
        return None if i is None else self._items[i]

    def value(self, name: str, *alternates: str) -> float:
        """Value of ``name`` (or the first present alternate); raises when absent."""
        for n in (name,) + alternates:
            p = self.find(n)
            if p is not None:
                return p.value
        raise MissingParameterError(name)

    def optional(self, name: str, default: float, *alternates: str) -> float:
        for n in (name,) + alternates:
            p = self.find(n)
            if p is not None:
                return p.value
        return default

    def with_values(self, **values: float) -> "ProjectionParameterSet":
        """Copy with the given entries replaced or appended."""
        out: List[ProjectionParameter] = []
        pending = {normalize_name(k): (k, v) for k, v in values.items()}
        for p in self._items:
            hit = pending.pop(normalize_name(p.name), None)
            out.append(ProjectionParameter(p.name, hit[1]) if hit else p)
        out.extend(ProjectionParameter(n, v) for n, v in pending.values())
        return ProjectionParameterSet(out)

    def with_defaults(self, **values: float) -> "ProjectionParameterSet":
        """Copy with the given entries appended only where missing."""
        missing = {k: v for k, v in values.items() if k not in self}
        return self.with_values(**missing) if missing else self

    def to_dict(self) -> Dict[str, float]:
        return {p.name: p.value for p in self._items}

    def _key(self) -> Tuple[Tuple[str, float], ...]:
        return tuple(sorted((normalize_name(p.name), p.value) for p in self._items))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectionParameterSet):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        inner = ", ".join(f"{p.name}={p.value!r}" for p in self._items)
        return f"ProjectionParameterSet({inner})"


class ParameterSetBuilder:
    """Mutable accumulator used while a clause is being parsed."""

    def __init__(self) -> None:
        self._values: Dict[str, ProjectionParameter] = {}

    def add(self, name: str, value: float) -> "ParameterSetBuilder":
        # a repeated name replaces the earlier value but keeps its position
        self._values[normalize_name(name)] = ProjectionParameter(name, float(value))
        return self

    def __len__(self) -> int:
        return len(self._values)

    def build(self) -> ProjectionParameterSet:
        return ProjectionParameterSet(self._values.values())


__all__ = [
    "normalize_name",
    "ProjectionParameter",
    "ProjectionParameterSet",
    "ParameterSetBuilder",
]
