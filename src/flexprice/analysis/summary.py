"""JSON-ready and plain-text summaries of analysis results."""

from ..models import Appliance, ComparisonResult, LoadProfile, TariffSlot, WindowRecommendation
from .alignment import energy_for_slot


def _iso(dt) -> str | None:
    return dt.isoformat() if dt is not None else None


def get_slots_summary(slots: list[TariffSlot], index: dict[int, float] | None = None) -> list[dict]:
    """Per-slot rows, with aligned load energy when a profile index is given."""
    rows = []
    for slot in slots:
        row = {
            "start": slot.start.isoformat(),
            "end": slot.end.isoformat(),
            "price": round(slot.price, 4),
            "unit": slot.unit,
        }
        if index is not None:
            energy = energy_for_slot(index, slot)
            row["load_kwh"] = round(energy, 3) if energy is not None else None
        rows.append(row)
    return rows


def get_recommendations_summary(
    recommendations: list[tuple[Appliance, WindowRecommendation]],
) -> list[dict]:
    return [
        {
            "appliance": appliance.id,
            "name": appliance.name,
            "duration_minutes": appliance.duration_minutes,
            "start": window.start.isoformat(),
            "end": window.end.isoformat(),
            "average_price": round(window.average_price, 4),
            "unit": window.unit,
        }
        for appliance, window in recommendations
    ]


def get_profile_summary(profile: LoadProfile) -> dict:
    """Summary of a normalized load profile."""
    return {
        "rows": profile.row_count,
        "total_kwh": round(profile.total_energy_kwh, 3),
        "range_start": _iso(profile.range_start),
        "range_end": _iso(profile.range_end),
        "unit": profile.unit_label,
        "notes": list(profile.notes),
    }


def get_comparison_summary(result: ComparisonResult, baseline_rate: float, unit: str) -> dict:
    """Summary of a dynamic versus flat-rate cost comparison."""
    currency = unit.split("/")[0] if unit else ""
    return {
        "baseline_rate": baseline_rate,
        "unit": unit,
        "currency": currency,
        "has_coverage": result.has_coverage,
        "slots": {
            "matched": result.matched_count,
            "missing": result.missing_count,
            "extra_profile_entries": result.extra_entries,
            "coverage_percent": round(result.coverage_slots * 100, 1),
        },
        "energy": {
            "matched_kwh": round(result.matched_energy, 3),
            "profile_kwh": round(result.total_profile_energy, 3),
            "coverage_percent": round(result.coverage_energy * 100, 1),
        },
        "costs": {
            "dynamic": round(result.dynamic_cost, 2),
            "static": round(result.static_cost, 2),
            "savings": round(result.savings, 2),
            "savings_percent": round(result.savings_percent * 100, 1),
            "dynamic_average_price": round(result.dynamic_average_price, 4),
        },
    }


def format_profile_summary_text(summary: dict) -> str:
    """Format a load profile summary as human-readable text."""
    lines = [
        f"Load profile: {summary['rows']} intervals, {summary['total_kwh']} kWh",
        f"- Range: {summary['range_start']} → {summary['range_end']}",
        f"- Unit: {summary['unit']}",
    ]
    for note in summary["notes"]:
        lines.append(f"- {note}")
    return "\n".join(lines)


def format_comparison_summary_text(summary: dict) -> str:
    """Format a cost comparison summary as human-readable text."""
    currency = summary["currency"]
    costs = summary["costs"]

    if not summary["has_coverage"]:
        return (
            "No overlap between the load profile and the tariff range "
            f"({summary['slots']['extra_profile_entries']} profile intervals outside it)"
        )

    lines = [
        f"Dynamic tariff vs flat rate ({summary['baseline_rate']} {summary['unit']})",
        f"- Dynamic cost: {currency} {costs['dynamic']:.2f} "
        f"(avg {costs['dynamic_average_price']:.4f} {summary['unit']})",
        f"- Flat-rate cost: {currency} {costs['static']:.2f}",
        f"- Savings: {currency} {costs['savings']:.2f} ({costs['savings_percent']}%)",
        f"- Matched slots: {summary['slots']['matched']} "
        f"({summary['slots']['coverage_percent']}% of tariff slots), "
        f"{summary['slots']['missing']} without load data",
        f"- Matched energy: {summary['energy']['matched_kwh']} of "
        f"{summary['energy']['profile_kwh']} kWh ({summary['energy']['coverage_percent']}%)",
    ]
    if summary["slots"]["extra_profile_entries"]:
        lines.append(
            f"- {summary['slots']['extra_profile_entries']} profile intervals fall outside the tariff slots"
        )
    return "\n".join(lines)
