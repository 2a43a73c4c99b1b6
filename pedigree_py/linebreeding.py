"""Linebreeding analysis of a prospective mating.

API:
    analyze_linebreeding(lookup, sire_id, dam_id, generations=None, config=None) -> LinebreedingReport
    analyze_dog_inbreeding(lookup, dog_id, generations=None, config=None) -> LinebreedingReport

Pipeline: validate -> resolve both roots -> enumerate pathways on each side ->
aggregate common ancestors -> Wright's coefficient -> diversity and advice.

Each call is self-contained: lookups are memoized, and warnings and inferred
ancestor coefficients are collected in an object that lives only for that
call, so concurrent analyses share nothing but the lookup itself.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .ancestry import MAX_GENERATIONS, AncestorPathSet, WarningLog, enumerate_parent_sides, enumerate_paths
from .common_ancestors import aggregate
from .config import Config
from .consanguinity import compute_coi
from .diversity import derive_diversity_and_advice, risk_level
from .errors import NotFoundError, ValidationError
from .lookup import CachedLookup, DogLookup
from .models import CommonAncestorRecord, DogRef, LinebreedingReport, WarningKind

INCOMPLETE_PEDIGREE = "Pedigree incomplete: both sire and dam must be recorded to compute an inbreeding coefficient."


def validate_generations(generations: object, max_generations: int = MAX_GENERATIONS) -> int:
    if isinstance(generations, bool) or not isinstance(generations, int):
        raise ValidationError(f"generations must be an integer, got {generations!r}", field="generations")
    ceiling = min(max_generations, MAX_GENERATIONS)
    if generations < 1 or generations > ceiling:
        raise ValidationError(f"generations must be between 1 and {ceiling}, got {generations}", field="generations")
    return generations


def validate_request(sire_id: Optional[str], dam_id: Optional[str], generations: object, max_generations: int = MAX_GENERATIONS) -> None:
    """Reject malformed input before any traversal starts."""
    if not sire_id:
        raise ValidationError("sireId is required", field="sireId")
    if not dam_id:
        raise ValidationError("damId is required", field="damId")
    validate_generations(generations, max_generations)
    if sire_id == dam_id:
        raise ValidationError(f"Dog {sire_id} cannot be mated with itself", field="damId")


class _Analysis:
    """Working state for a single analysis call."""

    def __init__(self, lookup: DogLookup, config: Config) -> None:
        self.lookup = CachedLookup(lookup)
        self.config = config
        self.warnings = WarningLog()
        self._inferred: Dict[Tuple[str, int], Optional[float]] = {}
        self._computing: Set[str] = set()

    def require(self, dog_id: str) -> DogRef:
        dog = self.lookup.get_dog(dog_id)
        if dog is None:
            raise NotFoundError(dog_id)
        return dog

    def coefficient(self, sire_id: str, dam_id: str, generations: int) -> Tuple[float, List[CommonAncestorRecord]]:
        sire_paths = enumerate_paths(self.lookup, sire_id, generations)
        dam_paths = enumerate_paths(self.lookup, dam_id, generations)
        return self.coefficient_of_sides(sire_paths, dam_paths, generations)

    def coefficient_of_dog(self, dog_id: str, generations: int) -> Tuple[float, List[CommonAncestorRecord]]:
        """F of a recorded dog from the shared ancestry of its sire and dam."""
        sire_paths, dam_paths = enumerate_parent_sides(self.lookup, dog_id, generations)
        return self.coefficient_of_sides(sire_paths, dam_paths, generations)

    def coefficient_of_sides(self, sire_paths: AncestorPathSet, dam_paths: AncestorPathSet,
                             generations: int) -> Tuple[float, List[CommonAncestorRecord]]:
        self.warnings.extend(sire_paths.warnings)
        self.warnings.extend(dam_paths.warnings)

        coefficient_of = None
        if self.config.infer_ancestor_coefficients:
            # nested inference looks one generation less deep each level
            def coefficient_of(dog: DogRef) -> Optional[float]:
                return self.ancestor_coefficient(dog, generations - 1)

        records = aggregate(sire_paths, dam_paths, coefficient_of)
        return compute_coi(records, self.warnings), records

    def ancestor_coefficient(self, dog: DogRef, generations: int) -> Optional[float]:
        """Recorded F of an ancestor, or F derived from its own parents."""
        if dog.own_inbreeding_coefficient is not None:
            return dog.own_inbreeding_coefficient
        if generations < 1 or not dog.sire_id or not dog.dam_id or dog.sire_id == dog.dam_id:
            return None
        key = (dog.id, generations)
        if key in self._inferred:
            return self._inferred[key]
        if dog.id in self._computing:
            self.warnings.add(
                WarningKind.CYCLE,
                dog.id,
                f"Dog {dog.id} appears in its own ancestry while inferring its inbreeding coefficient; treated as 0",
            )
            return 0.0
        self._computing.add(dog.id)
        try:
            f_anc, _ = self.coefficient_of_dog(dog.id, generations)
        finally:
            self._computing.discard(dog.id)
        self._inferred[key] = f_anc
        return f_anc

    def report(self, sire_id: str, dam_id: str, generations: int, coi: float,
               records: Sequence[CommonAncestorRecord], extra: Sequence[str] = ()) -> LinebreedingReport:
        thresholds = self.config.thresholds
        diversity, advice = derive_diversity_and_advice(coi, thresholds)
        return LinebreedingReport(
            sire_id=sire_id,
            dam_id=dam_id,
            generations=generations,
            inbreeding_coefficient=coi,
            genetic_diversity=diversity,
            common_ancestors=tuple(records),
            recommendations=tuple(list(extra) + advice),
            risk_level=risk_level(coi, thresholds),
            warnings=self.warnings.as_tuple(),
        )


class LinebreedingAnalyzer:
    """Binds a dog lookup and configuration; holds no per-call state."""

    def __init__(self, lookup: DogLookup, config: Optional[Config] = None) -> None:
        self.lookup = lookup
        self.config = config or Config()

    def analyze(self, sire_id: str, dam_id: str, generations: Optional[int] = None) -> LinebreedingReport:
        if generations is None:
            generations = self.config.default_generations
        validate_request(sire_id, dam_id, generations, self.config.max_generations)
        run = _Analysis(self.lookup, self.config)
        run.require(sire_id)
        run.require(dam_id)
        coi, records = run.coefficient(sire_id, dam_id, generations)
        return run.report(sire_id, dam_id, generations, coi, records)

    def analyze_dog(self, dog_id: str, generations: Optional[int] = None) -> LinebreedingReport:
        """Inbreeding of an existing dog, from the shared ancestry of its parents."""
        if generations is None:
            generations = self.config.default_generations
        if not dog_id:
            raise ValidationError("dogId is required", field="dogId")
        validate_generations(generations, self.config.max_generations)
        run = _Analysis(self.lookup, self.config)
        dog = run.require(dog_id)
        if dog.sire_id and dog.sire_id == dog.dam_id:
            raise ValidationError(f"Dog {dog_id} has the same dog recorded as sire and dam", field="damId")

        sire_id, dam_id = dog.sire_id or "", dog.dam_id or ""
        complete = bool(sire_id and dam_id)
        for parent_id, label in ((sire_id, "Sire"), (dam_id, "Dam")):
            if parent_id and run.lookup.get_dog(parent_id) is None:
                run.warnings.add(
                    WarningKind.MISSING_ANCESTOR,
                    parent_id,
                    f"{label} {parent_id} of dog {dog_id} could not be found; ancestry unknown beyond this point",
                )
                complete = False
        if not complete:
            return run.report(sire_id, dam_id, generations, 0.0, [], extra=[INCOMPLETE_PEDIGREE])

        coi, records = run.coefficient_of_dog(dog_id, generations)
        return run.report(sire_id, dam_id, generations, coi, records)


def analyze_linebreeding(lookup: DogLookup, sire_id: str, dam_id: str, generations: Optional[int] = None,
                         config: Optional[Config] = None) -> LinebreedingReport:
    return LinebreedingAnalyzer(lookup, config).analyze(sire_id, dam_id, generations)


def analyze_dog_inbreeding(lookup: DogLookup, dog_id: str, generations: Optional[int] = None,
                           config: Optional[Config] = None) -> LinebreedingReport:
    return LinebreedingAnalyzer(lookup, config).analyze_dog(dog_id, generations)
