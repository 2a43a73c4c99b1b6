"""Common-ancestor aggregation.

Intersects the sire-side and dam-side pathway sets of a prospective mating
and produces one CommonAncestorRecord per shared ancestor, carrying every
pathway from each side. A pair of pathways counts towards the coefficient only
when the two paths meet at the ancestor and nowhere else (Wright's path
method); ancestors that are only reachable through another common ancestor
therefore have no independent pair and are left out.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Callable, List, Optional

from .ancestry import AncestorPathSet
from .models import CommonAncestorRecord, DogRef

CoefficientOf = Callable[[DogRef], Optional[float]]


def _recorded_coefficient(dog: DogRef) -> Optional[float]:
    return dog.own_inbreeding_coefficient


def aggregate(sire_paths: AncestorPathSet, dam_paths: AncestorPathSet, coefficient_of: Optional[CoefficientOf] = None) -> List[CommonAncestorRecord]:
    """Return common ancestors ordered by contribution, then id.

    `coefficient_of` supplies the ancestor's own inbreeding coefficient; by
    default the recorded value on the DogRef is used.
    """
    if coefficient_of is None:
        coefficient_of = _recorded_coefficient

    records: List[CommonAncestorRecord] = []
    for anc_id in sorted(set(sire_paths) & set(dam_paths)):
        dog = sire_paths.dog(anc_id) or dam_paths.dog(anc_id)
        record = CommonAncestorRecord(
            dog_id=anc_id,
            sire_paths=sire_paths.sorted_paths(anc_id),
            dam_paths=dam_paths.sorted_paths(anc_id),
            dog=dog,
        )
        # a root paired only with itself, or an ancestor seen solely
        # through another common ancestor
        if not record.independent_pairs():
            continue
        f_anc = coefficient_of(dog) if dog is not None else None
        if f_anc is not None:
            record = replace(record, ancestor_inbreeding=f_anc)
        records.append(record)

    records.sort(key=lambda r: (-r.contribution, r.dog_id))
    return records
