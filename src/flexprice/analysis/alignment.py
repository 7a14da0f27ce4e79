"""Alignment of load-profile samples to tariff slot boundaries."""

import math
from datetime import datetime

from ..config import FIXED_INTERVAL_MINUTES
from ..models import LoadSample, TariffSlot

INTERVAL_MS = FIXED_INTERVAL_MINUTES * 60 * 1000


def slot_key(instant: datetime, interval_ms: int = INTERVAL_MS) -> int:
    """Map an instant to the epoch milliseconds of its canonical interval.

    Instants within the same interval share a key, so 00:07 and 00:08 both
    map to the 00:00 key on a 15-minute grid.
    """
    epoch_ms = round(instant.timestamp() * 1000)
    return (epoch_ms // interval_ms) * interval_ms


def build_index(samples: list[LoadSample]) -> dict[int, float]:
    """Build a slot key -> accumulated kWh lookup.

    Samples sharing a key are summed, so finer-grained exports collapse
    into the interval total instead of overwriting each other.
    """
    index: dict[int, float] = {}
    for sample in samples:
        key = slot_key(sample.start)
        index[key] = index.get(key, 0.0) + sample.energy_kwh
    return index


def energy_for_slot(index: dict[int, float], slot: TariffSlot) -> float | None:
    """Get the load energy aligned with a tariff slot, if any."""
    energy = index.get(slot_key(slot.start))
    if energy is None or not math.isfinite(energy):
        return None
    return energy
