"""Configuration: constants, environment and the appliance catalogue."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .models import Appliance

# Load environment variables from .env file
load_dotenv()

API_URL = "https://e-ckw-public-data.de-c1.eu1.cloudhub.io/api/v1/netzinformationen/energie/dynamische-preise"
DEFAULT_TARIFF_TYPE = "integrated"
DEFAULT_UNIT = "CHF/kWh"
DEFAULT_BASELINE_RATE = 0.25  # CHF/kWh, flat comparison price

# Load profiles and tariff slots are aligned on this cadence
FIXED_INTERVAL_MINUTES = 15

DEFAULT_APPLIANCES_PATH = Path(__file__).parent.parent.parent / "config" / "appliances.yaml"

DEFAULT_APPLIANCES = [
    Appliance(
        id="ev",
        name="EV charging",
        description="Charging window for a typical 7.4 kW wallbox (4 hours)",
        duration_minutes=240,
    ),
    Appliance(
        id="dryer",
        name="Tumble dryer",
        description="Standard dry programme (90 minutes)",
        duration_minutes=90,
    ),
    Appliance(
        id="heat_pump",
        name="Heat pump boost",
        description="Additional heating cycle (120 minutes)",
        duration_minutes=120,
    ),
    Appliance(
        id="water",
        name="Water heater",
        description="Heating the hot water tank (60 minutes)",
        duration_minutes=60,
    ),
]


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""
    pass


def get_api_url() -> str:
    """Get the tariff API URL (FLEXPRICE_API_URL overrides the default)."""
    return os.environ.get("FLEXPRICE_API_URL") or API_URL


def get_baseline_rate() -> float:
    """Get the flat comparison rate from FLEXPRICE_BASELINE_RATE."""
    value = os.environ.get("FLEXPRICE_BASELINE_RATE")
    if not value:
        return DEFAULT_BASELINE_RATE
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"FLEXPRICE_BASELINE_RATE is not a number: {value!r}")


def load_appliances_from_yaml(config_path: Path | None = None) -> list[Appliance]:
    """Load the appliance catalogue from a YAML file.

    Falls back to the built-in catalogue when no path is given and the
    default config file does not exist.
    """
    path = config_path or DEFAULT_APPLIANCES_PATH
    if config_path is None and not path.exists():
        return list(DEFAULT_APPLIANCES)

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML ({e})")

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping with an 'appliances' list")

    entries = data.get("appliances") or []
    if not isinstance(entries, list):
        raise ConfigError(f"{path}: 'appliances' must be a list")

    appliances = []
    for entry in entries:
        try:
            appliances.append(
                Appliance(
                    id=str(entry["id"]),
                    name=str(entry.get("name", entry["id"])),
                    description=str(entry.get("description", "")),
                    duration_minutes=int(entry["duration_minutes"]),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"{path}: invalid appliance entry {entry!r} ({e})")

    return appliances
