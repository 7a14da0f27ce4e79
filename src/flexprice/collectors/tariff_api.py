"""Dynamic tariff collector.

Fetches 15-minute dynamic prices from the public CKW price API, or builds
synthetic demo records in the same shape for offline use.

Each record looks like:
  {
    "start_timestamp": "2024-03-01T00:00:00+01:00",
    "end_timestamp": "2024-03-01T00:15:00+01:00",
    "integrated": [{"unit": "CHF_kWh", "value": "0.2231"}],
    "grid_usage": [...], "grid": [...], "electricity": [...]
  }
"""

import logging
import math
import random
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from ..config import get_api_url

logger = logging.getLogger(__name__)

DEMO_SLOT_COUNT = 96
DEMO_SLOT_MINUTES = 15
DEMO_UNIT = "CHF_kWh"

# Fixed grid surcharges added on top of grid usage in the demo "grid" price
DEMO_GRID_SURCHARGES = 0.030 + 0.0027 + 0.0041 + 0.0005 + 0.023


class TariffApiError(Exception):
    """Raised when the tariff API cannot be reached or returns bad data."""
    pass


def format_api_timestamp(dt: datetime) -> str:
    """Format a datetime as a UTC ISO string ('2024-03-01T23:00:00.000Z')."""
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def fetch_tariffs(
    start: datetime | None = None,
    end: datetime | None = None,
    tariff_type: str | None = None,
    api_url: str | None = None,
    timeout: float = 30.0,
) -> list[dict[str, Any]]:
    """Fetch raw tariff records from the dynamic price API.

    Args:
        start: Start of the requested range (naive means local time)
        end: End of the requested range
        tariff_type: Tariff type filter passed through to the API
        api_url: Override for the API endpoint (defaults to FLEXPRICE_API_URL)
        timeout: Request timeout in seconds

    Returns:
        List of raw tariff records
    """
    url = api_url or get_api_url()
    params = {}
    if start is not None:
        params["start_timestamp"] = format_api_timestamp(start)
    if end is not None:
        params["end_timestamp"] = format_api_timestamp(end)
    if tariff_type:
        params["tariff_type"] = tariff_type

    logger.debug("Fetching tariffs from %s with %s", url, params)

    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(url, params=params, headers={"Accept": "application/json"})
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as e:
        raise TariffApiError(f"HTTP error from tariff API: {e.response.status_code}")
    except httpx.HTTPError as e:
        raise TariffApiError(f"Network error connecting to tariff API: {e}")
    except ValueError as e:
        raise TariffApiError(f"Tariff API returned invalid JSON: {e}")

    if not isinstance(data, list):
        raise TariffApiError(f"Unexpected tariff API response: expected a list, got {type(data).__name__}")

    return data


def build_demo_data(
    base: datetime | None = None,
    slot_count: int = DEMO_SLOT_COUNT,
    slot_minutes: int = DEMO_SLOT_MINUTES,
    seed: int | None = None,
) -> list[dict[str, Any]]:
    """Build a day of synthetic tariff records.

    Prices follow two sine cycles per day with a little noise, starting at
    local midnight of today unless a base time is given.
    """
    rng = random.Random(seed)
    if base is None:
        base = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)

    def noise(scale: float) -> float:
        return (rng.random() - 0.5) * scale

    records = []
    for i in range(slot_count):
        start = base + timedelta(minutes=i * slot_minutes)
        end = start + timedelta(minutes=slot_minutes)

        swing = 0.05 * math.sin((i / slot_count) * math.pi * 4)
        integrated = 0.22 + swing + noise(0.01)
        grid_usage = integrated - 0.09
        electricity = 0.12 + swing * 0.6 + noise(0.007)
        grid = grid_usage + DEMO_GRID_SURCHARGES

        records.append({
            "start_timestamp": start.isoformat(),
            "end_timestamp": end.isoformat(),
            "integrated": [{"unit": DEMO_UNIT, "value": f"{integrated:.4f}"}],
            "grid_usage": [{"unit": DEMO_UNIT, "value": f"{grid_usage:.4f}"}],
            "grid": [{"unit": DEMO_UNIT, "value": f"{grid:.4f}"}],
            "electricity": [{"unit": DEMO_UNIT, "value": f"{electricity:.4f}"}],
        })

    return records
