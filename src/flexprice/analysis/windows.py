"""Cheapest contiguous usage window search over tariff slots."""

import math
from decimal import Decimal

from ..models import Appliance, TariffSlot, WindowRecommendation


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def slot_duration_minutes(slots: list[TariffSlot]) -> int:
    """Nominal slot length in minutes, taken from the first slot (minimum 1)."""
    first = slots[0]
    return max(1, round_half_up((first.end - first.start).total_seconds() / 60))


def find_cheapest_window(
    slots: list[TariffSlot], duration_minutes: float
) -> WindowRecommendation | None:
    """Find the contiguous run of slots with the lowest mean price.

    Slots must be sorted by start. The duration is rounded to a whole number
    of slots (at least one). Returns None when there are not enough slots to
    cover the duration. On equal means the earliest window is kept.
    """
    if not slots:
        return None

    window_size = max(1, round_half_up(duration_minutes / slot_duration_minutes(slots)))
    if window_size > len(slots):
        return None

    # Decimal sums of the printed prices keep equal windows exactly equal
    prices = [Decimal(repr(slot.price)) for slot in slots]
    best = None
    best_average = None
    current_sum = Decimal(0)

    for i, slot in enumerate(slots):
        current_sum += prices[i]
        if i >= window_size:
            current_sum -= prices[i - window_size]

        if i >= window_size - 1:
            average = current_sum / window_size
            if best_average is None or average < best_average:
                best_average = average
                first = slots[i - window_size + 1]
                best = WindowRecommendation(
                    start=first.start,
                    end=slot.end,
                    average_price=float(average),
                    unit=first.unit,
                )

    return best


def recommend_windows(
    slots: list[TariffSlot], appliances: list[Appliance]
) -> list[tuple[Appliance, WindowRecommendation]]:
    """Cheapest window per appliance, leaving out appliances that don't fit."""
    recommendations = []
    for appliance in appliances:
        window = find_cheapest_window(slots, appliance.duration_minutes)
        if window is not None:
            recommendations.append((appliance, window))
    return recommendations
