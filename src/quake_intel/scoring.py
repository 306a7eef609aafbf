"""Location risk scoring and magnitude statistics."""

from __future__ import annotations

from collections.abc import Iterable

from quake_intel.models import QuakeRecord, RiskAssessment, RiskLevel

# Level thresholds, checked highest first.
RISK_LEVELS: tuple[tuple[int, RiskLevel], ...] = (
    (50, "high"),
    (25, "elevated"),
    (10, "moderate"),
)


def calculate_risk_score(
    nearby_50km_count: int,
    nearby_250km_count: int,
    nearby_500km_count: int,
    max_nearby_magnitude: float,
) -> int:
    """Integer risk score for a location.

    Formula (frozen; it is the product's visible behaviour)::

        2 * quakes within 50 km
        + 10 if more than 10 quakes within 250 km
        + 15 if the largest quake within 50 km is M4+
        + 25 if the largest quake within 50 km is M5+
        + 5  if more than 5 quakes within 500 km
    """
    score = 2 * nearby_50km_count
    if nearby_250km_count > 10:
        score += 10
    if max_nearby_magnitude >= 4:
        score += 15
    if max_nearby_magnitude >= 5:
        score += 25
    if nearby_500km_count > 5:
        score += 5
    return score


def risk_level(score: int) -> RiskLevel:
    for threshold, level in RISK_LEVELS:
        if score >= threshold:
            return level
    return "low"


def assess(
    nearby_50km_count: int,
    nearby_250km_count: int,
    nearby_500km_count: int,
    max_nearby_magnitude: float,
) -> RiskAssessment:
    """Score a location from its nearby-activity counts."""
    score = calculate_risk_score(
        nearby_50km_count, nearby_250km_count, nearby_500km_count, max_nearby_magnitude,
    )
    factors = (
        f"{nearby_50km_count} quakes within 50km (30 days)",
        f"{nearby_250km_count} quakes M2.5+ within 250km (30 days)",
        f"{nearby_500km_count} quakes M4+ within 500km (7 days)",
        f"Largest nearby: M{max_nearby_magnitude:.1f}"
        if max_nearby_magnitude > 0
        else "No significant nearby activity",
    )
    return RiskAssessment(level=risk_level(score), score=score, factors=factors)


def magnitudes(quakes: Iterable[QuakeRecord]) -> list[float]:
    """Magnitudes of *quakes*, skipping events the upstream left unrated."""
    return [q.magnitude for q in quakes if q.magnitude is not None]


def average_magnitude(quakes: Iterable[QuakeRecord]) -> float:
    """Mean magnitude rounded to 2 places; 0.0 for an empty set."""
    mags = magnitudes(quakes)
    if not mags:
        return 0.0
    return round(sum(mags) / len(mags), 2)


def max_magnitude(quakes: Iterable[QuakeRecord]) -> float:
    return max(magnitudes(quakes), default=0.0)


def strongest(quakes: Iterable[QuakeRecord]) -> QuakeRecord | None:
    """Highest-magnitude quake; the first one wins on ties."""
    best: QuakeRecord | None = None
    for q in quakes:
        if q.magnitude is None:
            continue
        if best is None or q.magnitude > best.magnitude:  # type: ignore[operator]
            best = q
    return best
