"""Period-over-period trend classification.

Each trend compares a period against the immediately preceding period of the
same granularity. A relative change strictly greater than the threshold is
classified up or down; a change exactly at the threshold is ``stable``. The
first period of a series has no trend (``None``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

__all__ = [
    "BalanceTrend",
    "DEFAULT_THRESHOLD",
    "PROTEIN_REFERENCE_GRAMS",
    "ProgressTrend",
    "TrendThresholds",
    "Trends",
    "calorie_balance_trend",
    "classify_change",
    "nutrition_quality_trend",
    "workout_consistency_trend",
]

BalanceTrend = Literal["increasing", "decreasing", "stable"]
ProgressTrend = Literal["improving", "declining", "stable"]

DEFAULT_THRESHOLD = 0.02
PROTEIN_REFERENCE_GRAMS = 100.0
MAX_WEEKLY_WORKOUT_FREQUENCY = 7


@dataclass(frozen=True)
class TrendThresholds:
    """Relative thresholds for trend classification.

    Attributes
    ----------
    calorie_balance : float
        Fraction of the previous calorie balance
    workout_consistency : float
        Fraction of the maximum possible weekly workout frequency
    nutrition_quality : float
        Fraction of the protein reference target
    protein_target_grams : float
        Fixed daily protein reference
    """

    calorie_balance: float = DEFAULT_THRESHOLD
    workout_consistency: float = DEFAULT_THRESHOLD
    nutrition_quality: float = DEFAULT_THRESHOLD
    protein_target_grams: float = PROTEIN_REFERENCE_GRAMS

    def __post_init__(self) -> None:
        for name in ("calorie_balance", "workout_consistency", "nutrition_quality"):
            if getattr(self, name) < 0:
                raise ValueError(f"Trend threshold '{name}' must be non-negative")
        if self.protein_target_grams <= 0:
            raise ValueError("protein_target_grams must be positive")

    @classmethod
    def uniform(cls, threshold: float) -> TrendThresholds:
        """Use the same relative threshold for every trend."""
        return cls(
            calorie_balance=threshold,
            workout_consistency=threshold,
            nutrition_quality=threshold,
        )


@dataclass(frozen=True)
class Trends:
    """Trend labels of one period (all None for the first period)."""

    calorie_balance_trend: BalanceTrend | None = None
    workout_consistency: ProgressTrend | None = None
    nutrition_quality: ProgressTrend | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "calorieBalanceTrend": self.calorie_balance_trend,
            "workoutConsistency": self.workout_consistency,
            "nutritionQuality": self.nutrition_quality,
        }


def classify_change(
    previous: float,
    current: float,
    threshold: float,
    *,
    up: str,
    down: str,
    scale: float | None = None,
) -> str:
    """Classify the change from ``previous`` to ``current``.

    Parameters
    ----------
    previous, current
        Values of the preceding and the current period
    threshold
        Relative threshold; ``|change| <= threshold`` is stable
    up, down
        Labels for a rise and a fall
    scale
        Reference the change is measured against (default: ``|previous|``)

    Returns
    -------
    str
        ``up``, ``down`` or ``"stable"``
    """
    delta = current - previous
    reference = abs(previous) if scale is None else scale

    if reference == 0:
        # No meaningful relative change; any movement counts.
        if delta > 0:
            return up
        if delta < 0:
            return down
        return "stable"

    change = delta / reference
    if change > threshold:
        return up
    if change < -threshold:
        return down
    return "stable"


def calorie_balance_trend(
    previous_balance: float,
    current_balance: float,
    thresholds: TrendThresholds,
) -> BalanceTrend:
    """Relative change of average (consumed - burned)."""
    return classify_change(  # type: ignore[return-value]
        previous_balance,
        current_balance,
        thresholds.calorie_balance,
        up="increasing",
        down="decreasing",
    )


def workout_consistency_trend(
    previous_frequency: float,
    current_frequency: float,
    thresholds: TrendThresholds,
) -> ProgressTrend:
    """Change in weekly workout frequency relative to 7 possible days."""
    return classify_change(  # type: ignore[return-value]
        previous_frequency,
        current_frequency,
        thresholds.workout_consistency,
        up="improving",
        down="declining",
        scale=MAX_WEEKLY_WORKOUT_FREQUENCY,
    )


def nutrition_quality_trend(
    previous_protein: float,
    current_protein: float,
    thresholds: TrendThresholds,
) -> ProgressTrend:
    """Protein adherence: moving closer to the reference target improves."""
    target = thresholds.protein_target_grams
    previous_gap = abs(target - previous_protein)
    current_gap = abs(target - current_protein)

    return classify_change(  # type: ignore[return-value]
        -previous_gap,
        -current_gap,
        thresholds.nutrition_quality,
        up="improving",
        down="declining",
        scale=target,
    )
