"""Coefficient-of-inbreeding (COI) calculation.

API:
    compute_coi(common_ancestors, warnings=None) -> float

Implements Wright's path formula over aggregated common ancestors:

    COI = sum_A sum_{(p1, p2) of A} (1/2)^(n1 + n2 + 1) * (1 + F_A)

where n1/n2 are the lengths of the sire-side and dam-side pathways and F_A is
the ancestor's own inbreeding coefficient (0 when unknown). Every independent
pathway pair of an ancestor adds its own term; an ancestor reached twice
contributes twice.
"""
from __future__ import annotations
from typing import Iterable, Optional
import logging

from .ancestry import WarningLog
from .models import CommonAncestorRecord, WarningKind


def _ancestor_f(record: CommonAncestorRecord, warnings: Optional[WarningLog]) -> float:
    f_anc = record.ancestor_inbreeding
    if f_anc is None:
        return 0.0
    if 0.0 <= f_anc <= 1.0:
        return f_anc
    clamped = min(max(f_anc, 0.0), 1.0)
    msg = f"Inbreeding coefficient {f_anc!r} of ancestor {record.dog_id} is outside [0, 1]; using {clamped}"
    if warnings is not None:
        warnings.add(WarningKind.CLAMPED_COEFFICIENT, record.dog_id, msg)
    else:
        logging.warning(msg)
    return clamped


def compute_coi(common_ancestors: Iterable[CommonAncestorRecord], warnings: Optional[WarningLog] = None) -> float:
    """Sum Wright's terms over every independent pathway pair.

    The result is clamped to [0, 1]. A raw sum above 1 points at bad data
    (for example a dog registered twice under different ids) and is logged
    and, when `warnings` is given, recorded as a data-quality warning.
    """
    total = 0.0
    for record in common_ancestors:
        f_anc = _ancestor_f(record, warnings)
        for p1, p2 in record.independent_pairs():
            total += 0.5 ** (len(p1) + len(p2) + 1) * (1.0 + f_anc)

    if total > 1.0:
        msg = f"Raw inbreeding coefficient {total:.6f} exceeds 1; clamped to 1.0"
        if warnings is not None:
            warnings.add(WarningKind.CLAMPED_COEFFICIENT, "", msg)
        else:
            logging.warning(msg)
        return 1.0
    return total
