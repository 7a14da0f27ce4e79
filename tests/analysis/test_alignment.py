from datetime import datetime, timedelta

from flexprice.analysis.alignment import build_index, energy_for_slot, slot_key
from flexprice.models import LoadSample, TariffSlot


def sample(hour, minute, energy):
    start = datetime(2024, 3, 1, hour, minute)
    return LoadSample(start=start, end=start + timedelta(minutes=15), energy_kwh=energy)


def test_instants_in_same_interval_share_key():
    boundary = slot_key(datetime(2024, 3, 1, 0, 0))
    assert slot_key(datetime(2024, 3, 1, 0, 7)) == boundary
    assert slot_key(datetime(2024, 3, 1, 0, 8)) == boundary
    assert slot_key(datetime(2024, 3, 1, 0, 14, 59)) == boundary
    assert slot_key(datetime(2024, 3, 1, 0, 15)) == boundary + 15 * 60 * 1000


def test_index_sums_colliding_samples():
    """Samples at 00:00, 00:07 and 00:08 accumulate under one key."""
    index = build_index([sample(0, 0, 0.5), sample(0, 7, 0.25), sample(0, 8, 0.25), sample(0, 15, 1.0)])

    assert len(index) == 2
    assert index[slot_key(datetime(2024, 3, 1, 0, 0))] == 1.0
    assert index[slot_key(datetime(2024, 3, 1, 0, 15))] == 1.0


def test_energy_for_slot():
    index = build_index([sample(10, 0, 2.0)])
    hit = TariffSlot(datetime(2024, 3, 1, 10, 0), datetime(2024, 3, 1, 10, 15), 0.2, "CHF/kWh")
    miss = TariffSlot(datetime(2024, 3, 1, 11, 0), datetime(2024, 3, 1, 11, 15), 0.2, "CHF/kWh")

    assert energy_for_slot(index, hit) == 2.0
    assert energy_for_slot(index, miss) is None


def test_empty_index():
    assert build_index([]) == {}
