"""Cost comparison of a load profile under the dynamic tariff and a flat rate."""

import math

from ..models import ComparisonResult, TariffSlot
from .alignment import slot_key


def compare(
    slots: list[TariffSlot], index: dict[int, float], baseline_rate: float
) -> ComparisonResult:
    """Reconcile tariff slots with an aligned load profile.

    A slot is matched when the index holds finite energy under the slot's
    key. Index keys that no slot claims are counted as extra entries (load
    data outside the tariff range or on an offset cadence). There is no
    interpolation across partially overlapping intervals.
    """
    matched_count = 0
    missing_count = 0
    matched_energy = 0.0
    dynamic_cost = 0.0
    static_cost = 0.0
    consumed: set[int] = set()

    for slot in slots:
        key = slot_key(slot.start)
        energy = index.get(key)
        if energy is None or not math.isfinite(energy):
            missing_count += 1
            continue

        matched_energy += energy
        dynamic_cost += energy * slot.price
        static_cost += energy * baseline_rate
        matched_count += 1
        consumed.add(key)

    total_profile_energy = sum(index.values())
    extra_entries = sum(1 for key in index if key not in consumed)
    savings = static_cost - dynamic_cost

    return ComparisonResult(
        matched_count=matched_count,
        missing_count=missing_count,
        extra_entries=extra_entries,
        matched_energy=matched_energy,
        total_profile_energy=total_profile_energy,
        dynamic_cost=dynamic_cost,
        static_cost=static_cost,
        savings=savings,
        savings_percent=savings / static_cost if static_cost else 0.0,
        dynamic_average_price=dynamic_cost / matched_energy if matched_energy else 0.0,
        coverage_slots=matched_count / len(slots) if slots else 0.0,
        coverage_energy=matched_energy / total_profile_energy if total_profile_energy else 0.0,
    )
