"""Dog lookup collaborators.

The engine needs only one capability from its host: resolve a dog id to a
DogRef, or None when the id is unknown. Anything with a ``get_dog`` method
qualifies (``DogStore`` in storage.py, ``MappingDogLookup`` below, or a client
for a remote registry).
"""
from __future__ import annotations
from typing import Dict, Iterable, Optional, Protocol

from .models import DogRef


class DogLookup(Protocol):
    def get_dog(self, dog_id: str) -> Optional[DogRef]:
        ...


class MappingDogLookup:
    """Read-only lookup over an in-memory collection of dogs."""

    def __init__(self, dogs: Iterable[DogRef] = ()) -> None:
        self._dogs: Dict[str, DogRef] = {d.id: d for d in dogs}

    def get_dog(self, dog_id: str) -> Optional[DogRef]:
        return self._dogs.get(dog_id)

    def __contains__(self, dog_id: object) -> bool:
        return dog_id in self._dogs

    def __len__(self) -> int:
        return len(self._dogs)


class CachedLookup:
    """Memoizes a lookup for the duration of one analysis call.

    The same ancestor is usually requested once per path that reaches it, so
    each id is resolved only once. Misses are cached as well. Exceptions raised
    by the wrapped lookup are not cached and propagate to the caller.
    """

    def __init__(self, lookup: DogLookup) -> None:
        self._lookup = lookup
        self._cache: Dict[str, Optional[DogRef]] = {}

    def get_dog(self, dog_id: str) -> Optional[DogRef]:
        if dog_id in self._cache:
            return self._cache[dog_id]
        dog = self._lookup.get_dog(dog_id)
        self._cache[dog_id] = dog
        return dog
