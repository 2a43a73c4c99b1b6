"""Genetic diversity score and breeding advice derived from a COI.

Diversity is the simple complement ``1 - coi``. Advice and risk levels are
plain threshold lookups; the default cut-offs are 6.25% (offspring of first
cousins), 12.5% (half siblings) and 25% (full siblings).
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple

ACCEPTABLE = "Acceptable: low relatedness between sire and dam."
MODERATE = "Moderate relatedness: proceed with caution and consider health screening for recessive disorders common in the breed."
HIGH = "High relatedness: breeding not recommended without genetic counseling."
VERY_HIGH = "Very high inbreeding indicates significant genetic risk; outbreeding is strongly recommended."


@dataclass(frozen=True)
class Thresholds:
    moderate: float = 0.0625
    high: float = 0.125
    very_high: float = 0.25

    def __post_init__(self) -> None:
        if not 0.0 < self.moderate <= self.high <= self.very_high <= 1.0:
            raise ValueError("thresholds must satisfy 0 < moderate <= high <= very_high <= 1")


DEFAULT_THRESHOLDS = Thresholds()


def genetic_diversity(coi: float) -> float:
    return 1.0 - coi


def risk_level(coi: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> str:
    if coi < thresholds.moderate:
        return "Low"
    if coi < thresholds.high:
        return "Moderate"
    if coi < thresholds.very_high:
        return "High"
    return "Very High"


def recommendations_for(coi: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> List[str]:
    if coi < thresholds.moderate:
        return [ACCEPTABLE]
    if coi < thresholds.high:
        return [MODERATE]
    out = [HIGH]
    if coi >= thresholds.very_high:
        out.append(VERY_HIGH)
    return out


def derive_diversity_and_advice(coi: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> Tuple[float, List[str]]:
    """Return (genetic_diversity, recommendations) for a coefficient."""
    return genetic_diversity(coi), recommendations_for(coi, thresholds)
