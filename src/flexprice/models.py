"""Data models for tariff slots, load profiles and analysis results."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class TariffSlot:
    """A single dynamic-price interval."""

    start: datetime
    end: datetime
    price: float
    unit: str


@dataclass(frozen=True)
class LoadSample:
    """Energy consumed during one fixed interval."""

    start: datetime
    end: datetime
    energy_kwh: float


@dataclass(frozen=True)
class IngestedRow:
    """A data row that survived ingestion."""

    timestamp: datetime
    value: float
    aux: tuple[str, ...] = ()


@dataclass
class IngestedTable:
    """Result of reading a delimited load-profile export."""

    rows: list[IngestedRow]
    values_are_power: bool
    delimiter: str
    has_header: bool
    time_column: int
    value_column: int
    value_header: str | None = None
    watt_annotation: bool = False


@dataclass
class LoadProfile:
    """A normalized load profile plus summary metadata."""

    samples: list[LoadSample]
    row_count: int
    total_energy_kwh: float
    range_start: datetime | None
    range_end: datetime | None
    unit_label: str
    notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Appliance:
    """An appliance with a typical run duration."""

    id: str
    name: str
    description: str
    duration_minutes: int


@dataclass(frozen=True)
class WindowRecommendation:
    """Cheapest contiguous window for a given duration."""

    start: datetime
    end: datetime
    average_price: float
    unit: str


@dataclass(frozen=True)
class ComparisonResult:
    """Dynamic tariff cost versus a flat baseline rate."""

    matched_count: int
    missing_count: int
    extra_entries: int
    matched_energy: float
    total_profile_energy: float
    dynamic_cost: float
    static_cost: float
    savings: float
    savings_percent: float
    dynamic_average_price: float
    coverage_slots: float
    coverage_energy: float

    @property
    def has_coverage(self) -> bool:
        """True when at least one tariff slot matched load data."""
        return self.matched_count > 0
