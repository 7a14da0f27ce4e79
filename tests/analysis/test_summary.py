from datetime import datetime, timedelta

from flexprice.analysis import summary
from flexprice.analysis.alignment import build_index
from flexprice.analysis.comparison import compare
from flexprice.models import LoadProfile, LoadSample, TariffSlot

BASE = datetime(2024, 3, 1, 10, 0)


def make_slots(prices):
    return [
        TariffSlot(BASE + timedelta(minutes=15 * i), BASE + timedelta(minutes=15 * (i + 1)), price, "CHF/kWh")
        for i, price in enumerate(prices)
    ]


def test_slots_summary_includes_aligned_load():
    slots = make_slots([0.2, 0.1])
    index = build_index([LoadSample(BASE, BASE + timedelta(minutes=15), 1.5)])

    rows = summary.get_slots_summary(slots, index)

    assert rows[0]["load_kwh"] == 1.5
    assert rows[1]["load_kwh"] is None
    assert "load_kwh" not in summary.get_slots_summary(slots)[0]


def test_comparison_summary_text():
    slots = make_slots([0.20, 0.10, 0.30])
    samples = [
        LoadSample(BASE + timedelta(minutes=15 * i), BASE + timedelta(minutes=15 * (i + 1)), energy)
        for i, energy in enumerate([1.0, 2.0, 1.0])
    ]
    data = summary.get_comparison_summary(compare(slots, build_index(samples), 0.25), 0.25, "CHF/kWh")

    assert data["currency"] == "CHF"
    assert data["costs"] == {
        "dynamic": 0.7,
        "static": 1.0,
        "savings": 0.3,
        "savings_percent": 30.0,
        "dynamic_average_price": 0.175,
    }

    text = summary.format_comparison_summary_text(data)
    assert "Savings: CHF 0.30 (30.0%)" in text
    assert "Matched slots: 3" in text


def test_comparison_summary_text_without_coverage():
    slots = make_slots([0.2])
    index = build_index([LoadSample(BASE + timedelta(days=1), BASE + timedelta(days=1, minutes=15), 1.0)])
    data = summary.get_comparison_summary(compare(slots, index, 0.25), 0.25, "CHF/kWh")

    assert data["has_coverage"] is False
    assert summary.format_comparison_summary_text(data).startswith("No overlap")


def test_profile_summary_text():
    profile = LoadProfile(
        samples=[],
        row_count=0,
        total_energy_kwh=0.0,
        range_start=None,
        range_end=None,
        unit_label="kWh",
        notes=["Values read as energy per interval (kWh)"],
    )
    text = summary.format_profile_summary_text(summary.get_profile_summary(profile))

    assert text.startswith("Load profile: 0 intervals")
    assert "- Values read as energy per interval (kWh)" in text
