"""Ancestry graph construction.

Expands a root dog upward through its recorded sire and dam links and records,
for every ancestor reached, each distinct pathway by which it was reached.

API:
    build_ancestry(lookup, root_id, generations) -> AncestorPathSet
    enumerate_paths(lookup, dog_id, generations) -> AncestorPathSet
    enumerate_parent_sides(lookup, dog_id, generations) -> (AncestorPathSet, AncestorPathSet)
    build_pedigree_tree(lookup, dog_id, generations) -> Optional[AncestryNode]
    flatten_pedigree_tree(root) -> List[AncestryNode]
    ancestor_influence(lookup, dog_id, generations) -> Dict[str, float]

The traversal is depth-first and bounded by ``generations`` (never more than
MAX_GENERATIONS). Cycle protection is path-local: a dog is skipped only if it
is already on the path currently being expanded, so the same ancestor can
still be reached through independent branches.
"""
from __future__ import annotations
from collections.abc import Mapping
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple
import logging

from .errors import NotFoundError
from .lookup import DogLookup
from .models import AncestryNode, DataQualityWarning, DogRef, ParentSide, Pathway, WarningKind

MAX_GENERATIONS = 10


def clamp_generations(generations: int) -> int:
    """Bound a requested depth to [0, MAX_GENERATIONS]."""
    if generations <= 0:
        return 0
    if generations > MAX_GENERATIONS:
        logging.debug("clamping requested depth %d to %d generations", generations, MAX_GENERATIONS)
        return MAX_GENERATIONS
    return generations


class WarningLog:
    """Ordered, de-duplicated collection of DataQualityWarnings for one call."""

    def __init__(self) -> None:
        self._items: List[DataQualityWarning] = []
        self._seen: Set[Tuple[WarningKind, str, str]] = set()

    def add(self, kind: WarningKind, dog_id: str, message: str) -> None:
        if self._append(DataQualityWarning(kind=kind, dog_id=dog_id, message=message)):
            logging.warning("pedigree data quality: %s", message)

    def extend(self, warnings: Iterable[DataQualityWarning]) -> None:
        # already logged by whoever recorded them
        for w in warnings:
            self._append(w)

    def _append(self, warning: DataQualityWarning) -> bool:
        key = (warning.kind, warning.dog_id, warning.message)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._items.append(warning)
        return True

    def __iter__(self) -> Iterator[DataQualityWarning]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def as_tuple(self) -> Tuple[DataQualityWarning, ...]:
        return tuple(self._items)


class AncestorPathSet(Mapping):
    """Mapping ancestor id -> frozenset of Pathways from one root.

    The root itself is included with the empty pathway (generation 0).
    """

    def __init__(self, root_id: str) -> None:
        self.root_id = root_id
        self._paths: Dict[str, Set[Pathway]] = {}
        self._dogs: Dict[str, DogRef] = {}
        self.warnings = WarningLog()

    def add(self, dog: DogRef, path: Pathway) -> None:
        self._dogs.setdefault(dog.id, dog)
        self._paths.setdefault(dog.id, set()).add(path)

    def __getitem__(self, dog_id: str) -> FrozenSet[Pathway]:
        return frozenset(self._paths[dog_id])

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def dog(self, dog_id: str) -> Optional[DogRef]:
        return self._dogs.get(dog_id)

    def sorted_paths(self, dog_id: str) -> Tuple[Pathway, ...]:
        return tuple(sorted(self._paths.get(dog_id, ()), key=lambda p: p.sort_key()))


def _resolve_parent(lookup: DogLookup, dog: DogRef, side: ParentSide, on_path: FrozenSet[str], warnings: WarningLog) -> Optional[DogRef]:
    """Return the parent on `side` if it can be expanded, recording why not otherwise."""
    pid = dog.parent_id(side)
    if not pid:
        return None
    if pid in on_path:
        warnings.add(
            WarningKind.CYCLE,
            pid,
            f"Dog {pid} is recorded as its own ancestor ({side.value.lower()} of {dog.id}); branch skipped",
        )
        return None
    parent = lookup.get_dog(pid)
    if parent is None:
        warnings.add(
            WarningKind.MISSING_ANCESTOR,
            pid,
            f"{side.value} {pid} of dog {dog.id} could not be found; ancestry unknown beyond this point",
        )
    return parent


def build_ancestry(lookup: DogLookup, root_id: str, generations: int) -> AncestorPathSet:
    """Collect every pathway from `root_id` to each of its ancestors.

    An unknown root or a non-positive depth yields an empty set.
    """
    result = AncestorPathSet(root_id)
    depth = clamp_generations(generations)
    if depth == 0 or not root_id:
        return result
    root = lookup.get_dog(root_id)
    if root is None:
        return result

    def expand(dog: DogRef, path: Pathway, on_path: FrozenSet[str]) -> None:
        result.add(dog, path)
        if path.generation >= depth:
            return
        for side in (ParentSide.SIRE, ParentSide.DAM):
            parent = _resolve_parent(lookup, dog, side, on_path, result.warnings)
            if parent is not None:
                expand(parent, path.extend(side, parent.id), on_path | {parent.id})

    expand(root, Pathway(root.id), frozenset({root.id}))
    return result


def enumerate_paths(lookup: DogLookup, dog_id: str, generations: int) -> AncestorPathSet:
    """Pathways for one side of a mating, rooted at that side's dog."""
    return build_ancestry(lookup, dog_id, generations)


def enumerate_parent_sides(lookup: DogLookup, dog_id: str, generations: int) -> Tuple[AncestorPathSet, AncestorPathSet]:
    """Pathways rooted at a dog's own sire and dam.

    Used to compute a dog's own inbreeding coefficient from its parents'
    shared ancestry. A missing parent yields an empty set for that side.
    """
    dog = lookup.get_dog(dog_id)
    if dog is None:
        raise NotFoundError(dog_id)
    sire_set = enumerate_paths(lookup, dog.sire_id, generations) if dog.sire_id else AncestorPathSet("")
    dam_set = enumerate_paths(lookup, dog.dam_id, generations) if dog.dam_id else AncestorPathSet("")
    return sire_set, dam_set


def build_pedigree_tree(lookup: DogLookup, dog_id: str, generations: int, warnings: Optional[WarningLog] = None) -> Optional[AncestryNode]:
    """Build a nested AncestryNode tree for `dog_id`, parents sire first."""
    depth = clamp_generations(generations)
    root = lookup.get_dog(dog_id) if dog_id else None
    if root is None:
        return None
    if warnings is None:
        warnings = WarningLog()

    def expand(dog: DogRef, path: Pathway, on_path: FrozenSet[str]) -> AncestryNode:
        node = AncestryNode(dog=dog, path_from_root=path)
        if path.generation >= depth:
            return node
        for side in (ParentSide.SIRE, ParentSide.DAM):
            parent = _resolve_parent(lookup, dog, side, on_path, warnings)
            if parent is not None:
                node.parents.append(expand(parent, path.extend(side, parent.id), on_path | {parent.id}))
        return node

    return expand(root, Pathway(root.id), frozenset({root.id}))


def flatten_pedigree_tree(root: Optional[AncestryNode]) -> List[AncestryNode]:
    result: List[AncestryNode] = []

    def traverse(node: AncestryNode) -> None:
        result.append(node)
        for p in node.parents:
            traverse(p)

    if root is not None:
        traverse(root)
    return result


def ancestor_influence(lookup: DogLookup, dog_id: str, generations: int) -> Dict[str, float]:
    """Expected genome share contributed by each ancestor of `dog_id`.

    Each pathway of length n contributes (1/2)^n; an ancestor reached through
    several pathways accumulates all of them. Ordered by descending share.
    """
    paths = build_ancestry(lookup, dog_id, generations)
    shares: Dict[str, float] = {}
    for anc_id in paths:
        if anc_id == paths.root_id:
            continue
        shares[anc_id] = sum(0.5 ** len(p) for p in paths.sorted_paths(anc_id))
    return dict(sorted(shares.items(), key=lambda kv: (-kv[1], kv[0])))
