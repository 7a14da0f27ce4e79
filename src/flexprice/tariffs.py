"""Tariff slot model: normalizing raw dynamic-price records."""

import logging
import math
from typing import Any

from .config import DEFAULT_TARIFF_TYPE, DEFAULT_UNIT
from .models import TariffSlot
from .timestamps import parse_timestamp

logger = logging.getLogger(__name__)

# Probed in this order when the requested tariff type has no entry
FALLBACK_TARIFF_TYPES = ("integrated", "grid", "grid_usage", "electricity")


def _first_entry(record: dict, key: str) -> dict | None:
    entries = record.get(key)
    if isinstance(entries, list) and entries and entries[0]:
        return entries[0]
    return None


def extract_price(record: dict, tariff_type: str) -> dict | None:
    """Pick the price entry for a record.

    The requested tariff type wins if present and non-empty; otherwise the
    first non-empty fallback type is used.
    """
    entry = _first_entry(record, tariff_type)
    if entry is not None:
        return entry

    for key in FALLBACK_TARIFF_TYPES:
        entry = _first_entry(record, key)
        if entry is not None:
            return entry
    return None


def format_unit(raw_unit: Any) -> str:
    """Convert an API unit such as 'CHF_kWh' to 'CHF/kWh'."""
    if not raw_unit:
        return DEFAULT_UNIT
    return str(raw_unit).replace("_", "/", 1)


def build_slot(record: dict, tariff_type: str) -> TariffSlot | None:
    """Build one tariff slot, or None if the record has no usable price."""
    if not isinstance(record, dict):
        return None

    entry = extract_price(record, tariff_type)
    if entry is None or not isinstance(entry, dict):
        return None

    start = parse_timestamp(record.get("start_timestamp") or record.get("startTimestamp"))
    end = parse_timestamp(record.get("end_timestamp") or record.get("endTimestamp"))
    if start is None or end is None:
        logger.debug("Dropping tariff record with unparseable timestamps: %r", record)
        return None

    try:
        price = float(entry.get("value"))
    except (TypeError, ValueError):
        logger.debug("Dropping tariff record with non-numeric price: %r", entry)
        return None

    if not math.isfinite(price):
        return None

    try:
        if not start < end:
            logger.debug("Dropping tariff record with end before start: %r", record)
            return None
    except TypeError:
        # Mixed offset-aware and naive timestamps within one record
        return None

    return TariffSlot(start=start, end=end, price=price, unit=format_unit(entry.get("unit")))


def build_slots(records: list[dict] | None, tariff_type: str = DEFAULT_TARIFF_TYPE) -> list[TariffSlot]:
    """Normalize raw tariff records into slots sorted by start time.

    Records without a matching price are left out. An empty list means
    there is no data for the requested range or tariff type.
    """
    slots = []
    for record in records or []:
        slot = build_slot(record, tariff_type or DEFAULT_TARIFF_TYPE)
        if slot is not None:
            slots.append(slot)

    dropped = len(records or []) - len(slots)
    if dropped:
        logger.debug("Dropped %d tariff record(s) without a usable %s price", dropped, tariff_type)

    return sorted(slots, key=lambda s: s.start.timestamp())
