from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any, Mapping, Tuple, NamedTuple, FrozenSet

from .errors import ValidationError


class Sex(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    UNKNOWN = "Unknown"

    @staticmethod
    def parse(value: Any) -> "Sex":
        """Accept 'M'/'F', 'male'/'female', enum members or None."""
        if isinstance(value, Sex):
            return value
        if not value:
            return Sex.UNKNOWN
        txt = str(value).strip().lower()
        if txt in ("m", "male", "dog", "sire"):
            return Sex.MALE
        if txt in ("f", "female", "bitch", "dam"):
            return Sex.FEMALE
        return Sex.UNKNOWN


class ParentSide(str, Enum):
    SIRE = "Sire"
    DAM = "Dam"


def _first(d: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        if d.get(k) is not None:
            return d[k]
    return None


@dataclass(frozen=True)
class DogRef:
    id: str
    sex: Sex = Sex.UNKNOWN
    sire_id: Optional[str] = None
    dam_id: Optional[str] = None
    own_inbreeding_coefficient: Optional[float] = None
    name: str = ""
    registration_number: Optional[str] = None
    breed: Optional[str] = None

    def parent_id(self, side: ParentSide) -> Optional[str]:
        return self.sire_id if side is ParentSide.SIRE else self.dam_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sex": self.sex.value,
            "sireId": self.sire_id,
            "damId": self.dam_id,
            "registrationNumber": self.registration_number,
            "breed": self.breed,
            "ownInbreedingCoefficient": self.own_inbreeding_coefficient,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "DogRef":
        # both the camelCase wire keys and snake_case storage keys are accepted
        if not isinstance(d, Mapping):
            raise ValidationError(f"Dog record must be an object, got {type(d).__name__}", field="record")
        dog_id = d.get("id")
        if dog_id is None or str(dog_id).strip() == "":
            raise ValidationError("Dog record requires an id", field="id")
        coi = _first(d, "ownInbreedingCoefficient", "own_inbreeding_coefficient", "coi")
        if coi is not None:
            try:
                coi = float(coi)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid inbreeding coefficient for dog {dog_id}: {coi!r}", field="ownInbreedingCoefficient")
            if not 0.0 <= coi <= 1.0:
                raise ValidationError(f"Inbreeding coefficient for dog {dog_id} must be within [0, 1]", field="ownInbreedingCoefficient")
        sire_id = _first(d, "sireId", "sire_id")
        dam_id = _first(d, "damId", "dam_id")
        return DogRef(
            id=str(dog_id),
            sex=Sex.parse(d.get("sex") or d.get("gender")),
            sire_id=str(sire_id) if sire_id else None,
            dam_id=str(dam_id) if dam_id else None,
            own_inbreeding_coefficient=coi,
            name=d.get("name") or "",
            registration_number=_first(d, "registrationNumber", "registration_number"),
            breed=d.get("breed"),
        )


class PathStep(NamedTuple):
    side: ParentSide
    dog_id: str


@dataclass(frozen=True)
class Pathway:
    """Route from a root dog to one of its ancestors, one step per generation."""

    root_id: str
    steps: Tuple[PathStep, ...] = ()

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def generation(self) -> int:
        return len(self.steps)

    @property
    def sides(self) -> Tuple[ParentSide, ...]:
        return tuple(s.side for s in self.steps)

    @property
    def target_id(self) -> str:
        return self.steps[-1].dog_id if self.steps else self.root_id

    def dog_ids(self) -> Tuple[str, ...]:
        return (self.root_id,) + tuple(s.dog_id for s in self.steps)

    def contains(self, dog_id: str) -> bool:
        return dog_id in self.dog_ids()

    def extend(self, side: ParentSide, dog_id: str) -> "Pathway":
        return Pathway(self.root_id, self.steps + (PathStep(side, dog_id),))

    def members(self) -> FrozenSet[str]:
        """Dogs the path passes through before reaching its target."""
        return frozenset(self.dog_ids()[:-1])

    def sort_key(self) -> Tuple[int, Tuple[int, ...], Tuple[str, ...]]:
        return (
            len(self.steps),
            tuple(0 if s.side is ParentSide.SIRE else 1 for s in self.steps),
            tuple(s.dog_id for s in self.steps),
        )

    def render(self, root_label: str, target_label: str = "(common ancestor)") -> str:
        return " → ".join([root_label] + [s.side.value for s in self.steps] + [target_label])


@dataclass
class AncestryNode:
    dog: DogRef
    path_from_root: Pathway
    parents: List["AncestryNode"] = field(default_factory=list)

    @property
    def generation(self) -> int:
        return self.path_from_root.generation

    def parent(self, side: ParentSide) -> Optional["AncestryNode"]:
        for p in self.parents:
            if p.path_from_root.steps and p.path_from_root.steps[-1].side is side:
                return p
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dog": self.dog.to_dict(),
            "generation": self.generation,
            "path": [s.value for s in self.path_from_root.sides],
            "sire": self.parent(ParentSide.SIRE).to_dict() if self.parent(ParentSide.SIRE) else None,
            "dam": self.parent(ParentSide.DAM).to_dict() if self.parent(ParentSide.DAM) else None,
        }


class WarningKind(str, Enum):
    CYCLE = "cycle"
    MISSING_ANCESTOR = "missing_ancestor"
    CLAMPED_COEFFICIENT = "clamped_coefficient"


@dataclass(frozen=True)
class DataQualityWarning:
    kind: WarningKind
    dog_id: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "dogId": self.dog_id, "message": self.message}


PathPair = Tuple[Pathway, Pathway]


@dataclass(frozen=True)
class CommonAncestorRecord:
    dog_id: str
    sire_paths: Tuple[Pathway, ...]
    dam_paths: Tuple[Pathway, ...]
    dog: Optional[DogRef] = None
    # F of the ancestor as used in the coefficient; None means unknown (0)
    ancestor_inbreeding: Optional[float] = None

    @property
    def occurrences(self) -> int:
        return len(self.sire_paths) * len(self.dam_paths)

    def path_pairs(self) -> List[PathPair]:
        return [(p1, p2) for p1 in self.sire_paths for p2 in self.dam_paths]

    def independent_pairs(self) -> List[PathPair]:
        """Pairs whose paths meet only at this ancestor."""
        out = []
        for p1, p2 in self.path_pairs():
            if not p1.steps and not p2.steps:
                continue
            if p1.members().isdisjoint(p2.members()):
                out.append((p1, p2))
        return out

    @property
    def independent_occurrences(self) -> int:
        return len(self.independent_pairs())

    @property
    def contribution(self) -> float:
        total = 0.0
        for p1, p2 in self.independent_pairs():
            total += 0.5 ** (len(p1) + len(p2))
        return total

    def pathways(self) -> List[str]:
        return [f"{p1.render('Sire')} / {p2.render('Dam')}" for p1, p2 in self.independent_pairs()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dog": self.dog.to_dict() if self.dog else {"id": self.dog_id},
            # every path pair; pathways and contribution cover the independent ones only
            "occurrences": self.occurrences,
            "independentOccurrences": self.independent_occurrences,
            "contribution": self.contribution,
            "pathways": self.pathways(),
            "ancestorInbreeding": self.ancestor_inbreeding,
        }


@dataclass(frozen=True)
class LinebreedingReport:
    sire_id: str
    dam_id: str
    generations: int
    inbreeding_coefficient: float
    genetic_diversity: float
    common_ancestors: Tuple[CommonAncestorRecord, ...] = ()
    recommendations: Tuple[str, ...] = ()
    risk_level: str = "Low"
    warnings: Tuple[DataQualityWarning, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sireId": self.sire_id,
            "damId": self.dam_id,
            "generations": self.generations,
            "inbreedingCoefficient": self.inbreeding_coefficient,
            "geneticDiversity": self.genetic_diversity,
            "riskLevel": self.risk_level,
            "commonAncestors": [c.to_dict() for c in self.common_ancestors],
            "recommendations": list(self.recommendations),
            "warnings": [w.to_dict() for w in self.warnings],
        }
