import logging

from pedigree_py.ancestry import WarningLog
from pedigree_py.consanguinity import compute_coi
from pedigree_py.models import CommonAncestorRecord, ParentSide, Pathway, WarningKind


def approx_eq(a, b, eps=1e-12):
    return abs(a - b) <= eps


def path(root, *steps):
    p = Pathway(root)
    for side, dog_id in steps:
        p = p.extend(side, dog_id)
    return p


SIRE, DAM = ParentSide.SIRE, ParentSide.DAM


def test_no_common_ancestors():
    assert compute_coi([]) == 0.0


def test_single_pair():
    rec = CommonAncestorRecord(dog_id="A", sire_paths=(path("S", (SIRE, "A")),), dam_paths=(path("D", (SIRE, "A")),))
    assert approx_eq(compute_coi([rec]), 0.125)


def test_every_independent_pair_is_summed():
    rec = CommonAncestorRecord(
        dog_id="A",
        sire_paths=(path("S", (SIRE, "x"), (SIRE, "A")), path("S", (DAM, "y"), (SIRE, "A"))),
        dam_paths=(path("D", (SIRE, "A")),),
    )
    assert approx_eq(compute_coi([rec]), 2 * 0.5 ** 4)


def test_overlapping_pairs_are_ignored():
    # both paths run through "x" before reaching A
    rec = CommonAncestorRecord(
        dog_id="A",
        sire_paths=(path("S", (SIRE, "x"), (SIRE, "A")),),
        dam_paths=(path("D", (DAM, "x"), (SIRE, "A")),),
    )
    assert compute_coi([rec]) == 0.0


def test_ancestor_inbreeding_scales_term():
    rec = CommonAncestorRecord(
        dog_id="A",
        sire_paths=(path("S", (SIRE, "A")),),
        dam_paths=(path("D", (SIRE, "A")),),
        ancestor_inbreeding=0.25,
    )
    assert approx_eq(compute_coi([rec]), 0.125 * 1.25)


def test_out_of_range_ancestor_coefficient_is_clamped():
    rec = CommonAncestorRecord(
        dog_id="A",
        sire_paths=(path("S", (SIRE, "A")),),
        dam_paths=(path("D", (SIRE, "A")),),
        ancestor_inbreeding=1.5,
    )
    warnings = WarningLog()
    assert approx_eq(compute_coi([rec], warnings), 0.25)
    assert [w.kind for w in warnings] == [WarningKind.CLAMPED_COEFFICIENT]


def test_raw_sum_above_one_is_clamped_and_logged(caplog):
    rec = CommonAncestorRecord(
        dog_id="A",
        sire_paths=(Pathway("A"),),
        dam_paths=(path("D", (SIRE, "A")), path("D", (DAM, "A")), path("E", (SIRE, "A"))),
        ancestor_inbreeding=1.0,
    )
    warnings = WarningLog()
    with caplog.at_level(logging.WARNING):
        coi = compute_coi([rec], warnings)
    assert coi == 1.0
    assert any(w.kind is WarningKind.CLAMPED_COEFFICIENT for w in warnings)
    assert "clamped" in caplog.text


def test_clamp_logged_without_warning_log(caplog):
    rec = CommonAncestorRecord(
        dog_id="A",
        sire_paths=(Pathway("A"),),
        dam_paths=(path("D", (SIRE, "A")), path("D", (DAM, "A")), path("E", (SIRE, "A"))),
        ancestor_inbreeding=1.0,
    )
    with caplog.at_level(logging.WARNING):
        assert compute_coi([rec]) == 1.0
    assert "exceeds 1" in caplog.text
