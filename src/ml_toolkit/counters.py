"""Counting structures used while training and scoring.

Single-key counts (label -> int) use :class:`collections.Counter` directly,
which already returns 0 for missing keys. The two-key structures here are
keyed by ``(outer, inner)`` -- in practice ``(label, feature)`` -- and follow
the same default-on-miss policy: reading an absent pair never raises.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Hashable, Iterable, Iterator
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class NestedCounter(Generic[K]):
    """Integer counter over ``(key1, key2)`` pairs.

    Missing pairs read as 0. Unlike ``Counter.__getitem__``, ``get`` does
    not insert the pair, so reading never changes ``len()`` or iteration.

    Example::

        counts = NestedCounter()
        counts.increment("spam", "free")
        counts.increment("spam", "free")
        counts.get("spam", "free")   # 2
        counts.get("ham", "free")    # 0
    """

    def __init__(self) -> None:
        self._values: Counter[tuple[K, K]] = Counter()
        self._inner_keys: dict[K, set[K]] = defaultdict(set)

    def increment(self, key1: K, key2: K, amount: int = 1) -> None:
        """Add ``amount`` to the count at ``(key1, key2)``."""
        self._values[(key1, key2)] += amount
        self._inner_keys[key1].add(key2)

    def initialize(self, key1: K, key2: K) -> None:
        """Record the pair with an explicit count of 0."""
        self._values[(key1, key2)] = 0
        self._inner_keys[key1].add(key2)

    def get(self, key1: K, key2: K) -> int:
        return self._values.get((key1, key2), 0)

    def contains_value_at(self, key1: K, key2: K) -> bool:
        return (key1, key2) in self._values

    def outer_keys(self) -> set[K]:
        return set(self._inner_keys)

    def inner_keys(self, key1: K) -> set[K]:
        return set(self._inner_keys.get(key1, ()))

    def all_keys(self) -> set[K]:
        """Every key seen in either position."""
        keys: set[K] = set(self._inner_keys)
        for inner in self._inner_keys.values():
            keys.update(inner)
        return keys

    def total(self, key1: K) -> int:
        """Sum of all counts under ``key1``."""
        return sum(self._values[(key1, k2)] for k2 in self._inner_keys.get(key1, ()))

    def items(self) -> Iterator[tuple[tuple[K, K], int]]:
        return iter(self._values.items())

    def __contains__(self, key: object) -> bool:
        return key in self.all_keys()

    def __len__(self) -> int:
        return len(self._inner_keys)

    def __bool__(self) -> bool:
        return bool(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NestedCounter):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"NestedCounter({dict(self._values)!r})"


class NestedDictionary(Generic[K, V]):
    """Two-level mapping ``key1 -> key2 -> value``.

    ``get`` is strict (raises ``KeyError``); ``safe_get`` returns a default
    for any missing pair, which is what training and classification use for
    (label, feature) combinations that were never observed.
    """

    def __init__(self, values: dict[K, dict[K, V]] | None = None) -> None:
        self._values: dict[K, dict[K, V]] = {}
        if values:
            for key1, inner in values.items():
                self._values[key1] = dict(inner)

    def put(self, key1: K, key2: K, value: V) -> None:
        self._values.setdefault(key1, {})[key2] = value

    def get(self, key1: K, key2: K) -> V:
        return self._values[key1][key2]

    def safe_get(self, key1: K, key2: K, default: V) -> V:
        inner = self._values.get(key1)
        if inner is None:
            return default
        return inner.get(key2, default)

    def inner(self, key1: K) -> dict[K, V]:
        """The inner mapping for ``key1`` (empty if absent)."""
        return self._values.get(key1, {})

    def has_value_at(self, key1: K, key2: K) -> bool:
        return key1 in self._values and key2 in self._values[key1]

    def outer_keys(self) -> set[K]:
        return set(self._values)

    def items(self) -> Iterable[tuple[K, K, V]]:
        """Yield ``(key1, key2, value)`` triples."""
        for key1, inner in self._values.items():
            for key2, value in inner.items():
                yield key1, key2, value

    def to_dict(self) -> dict[K, dict[K, V]]:
        return {k: dict(v) for k, v in self._values.items()}

    def __len__(self) -> int:
        return sum(len(inner) for inner in self._values.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NestedDictionary):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"NestedDictionary({self._values!r})"
