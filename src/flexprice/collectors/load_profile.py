"""Load-profile importer for smart meter and utility portal exports.

Accepts loosely structured delimited text: semicolon, tab or comma
separated, with or without a header row, timestamps in ISO or Swiss
(D.M.YYYY H:MM) notation, and values as either energy per interval (kWh)
or mean power (kW).

Typical inputs:
  Zeitstempel;Wert [kWh]
  01.03.2024 00:00;0,125

  timestamp,Leistung kW,status
  2024-03-01T00:00:00,0.5,measured
"""

import csv
import logging
import math
import re
from datetime import timedelta
from pathlib import Path

from ..config import FIXED_INTERVAL_MINUTES
from ..models import IngestedRow, IngestedTable, LoadProfile, LoadSample
from ..timestamps import parse_timestamp

logger = logging.getLogger(__name__)

# Column detection rules, evaluated in order. First matching column wins.
TIME_KEYWORDS = ("timestamp", "zeitpunkt", "zeit", "datetime", "start", "von")
VALUE_KEYWORDS = ("value", "kwh", "kw", "verbrauch", "lastgang", "leistung")

# Value header markers for power (kW) rather than energy (kWh)
POWER_HEADER_PATTERNS = (
    re.compile(r"\bkw\b"),
    re.compile(r"\bleistung\b"),
    # OBIS active power registers, e.g. 1-1:1.5.0 (mean import power)
    re.compile(r"\b1-\d+:[12]\.[457]\.0\b"),
)
UNIT_TOKEN = re.compile(r"\b(k?w)\b", re.IGNORECASE)
NUMERIC_JUNK = re.compile(r"[^0-9,.\-+]")
LINE_BREAK = re.compile(r"\r\n|\r|\n")


class LoadProfileError(ValueError):
    """Base exception for load-profile import errors."""
    pass


class EmptyInputError(LoadProfileError):
    """The input contains no non-blank lines."""
    pass


class SchemaError(LoadProfileError):
    """Fewer than two usable columns could be resolved."""
    pass


class NoDataError(LoadProfileError):
    """No row had both a valid timestamp and a numeric value."""
    pass


def detect_delimiter(line: str) -> str:
    """Pick the delimiter from the first line: ';', then tab, then ','."""
    if ";" in line:
        return ";"
    if "\t" in line:
        return "\t"
    return ","


def split_row(line: str, delimiter: str) -> list[str] | None:
    """Split one line into stripped cells, honouring quoted fields.

    Returns None for lines the csv module rejects (e.g. oversized fields).
    """
    try:
        cells = next(csv.reader([line], delimiter=delimiter), [])
    except csv.Error:
        return None
    return [cell.strip() for cell in cells]


def _find_column(header: list[str], keywords: tuple[str, ...]) -> int | None:
    for index, cell in enumerate(header):
        if any(keyword in cell for keyword in keywords):
            return index
    return None


def resolve_columns(header: list[str]) -> tuple[int, int]:
    """Resolve (time_column, value_column) from lower-cased header cells."""
    if len(header) < 2:
        raise SchemaError(
            f"Header has {len(header)} column(s); need at least a time and a value column"
        )

    time_col = _find_column(header, TIME_KEYWORDS)
    if time_col is None:
        time_col = 0

    value_col = _find_column(header, VALUE_KEYWORDS)
    if value_col is None or value_col == time_col:
        value_col = 0 if time_col == 1 else 1

    return time_col, value_col


def header_indicates_power(header_text: str) -> bool:
    """Check whether a value column header describes power (kW)."""
    text = header_text.lower()
    return any(pattern.search(text) for pattern in POWER_HEADER_PATTERNS)


def parse_number(cell: str) -> float | None:
    """Permissively parse a numeric cell ('1,25 kWh' -> 1.25)."""
    cleaned = NUMERIC_JUNK.sub("", cell).replace(",", ".")
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def ingest(raw_text: str) -> IngestedTable:
    """Detect the layout of a delimited load-profile export and read its rows.

    Rows with an unparseable timestamp or value are skipped. Raises
    EmptyInputError, SchemaError or NoDataError when the input as a whole
    cannot be used.
    """
    lines = [line for line in LINE_BREAK.split(raw_text or "") if line.strip()]
    if not lines:
        raise EmptyInputError("The load profile is empty")

    delimiter = detect_delimiter(lines[0])
    first = split_row(lines[0], delimiter)
    if first is None:
        raise SchemaError("The first line of the load profile could not be split into columns")

    values_are_power = False
    value_header = None

    if first and parse_timestamp(first[0]) is not None:
        # No header row, data starts on the first line
        has_header = False
        if len(first) < 2:
            raise SchemaError(
                "The load profile has only one column; need a time and a value column"
            )
        time_col, value_col = 0, 1
        data_lines = lines
    else:
        has_header = True
        header = [cell.lower() for cell in first]
        time_col, value_col = resolve_columns(header)
        value_header = first[value_col]
        values_are_power = header_indicates_power(value_header)
        data_lines = lines[1:]

    logger.debug(
        "Load profile layout: delimiter=%r header=%s time_col=%d value_col=%d power=%s",
        delimiter, has_header, time_col, value_col, values_are_power,
    )

    rows = []
    watt_annotation = False
    skipped = 0
    min_length = max(time_col, value_col) + 1

    for line in data_lines:
        cells = split_row(line, delimiter)
        if cells is None or len(cells) < min_length:
            skipped += 1
            continue

        timestamp = parse_timestamp(cells[time_col])
        if timestamp is None:
            skipped += 1
            continue

        value = parse_number(cells[value_col])
        if value is None:
            skipped += 1
            continue

        aux = tuple(
            cell for index, cell in enumerate(cells) if index not in (time_col, value_col)
        )
        for cell in aux:
            for token in UNIT_TOKEN.findall(cell):
                values_are_power = True
                if token.lower() == "w":
                    watt_annotation = True

        rows.append(IngestedRow(timestamp=timestamp, value=value, aux=aux))

    if skipped:
        logger.debug("Skipped %d unusable load profile row(s)", skipped)

    if not rows:
        raise NoDataError("No rows with a valid timestamp and numeric value were found")

    return IngestedTable(
        rows=rows,
        values_are_power=values_are_power,
        delimiter=delimiter,
        has_header=has_header,
        time_column=time_col,
        value_column=value_col,
        value_header=value_header,
        watt_annotation=watt_annotation,
    )


def normalize(
    table: IngestedTable, interval_minutes: int = FIXED_INTERVAL_MINUTES
) -> LoadProfile:
    """Convert ingested rows to fixed-interval energy samples sorted by start.

    Power readings (kW) are converted to energy per interval (kWh).
    """
    interval = timedelta(minutes=interval_minutes)
    factor = interval_minutes / 60 if table.values_are_power else 1.0

    samples = [
        LoadSample(
            start=row.timestamp,
            end=row.timestamp + interval,
            energy_kwh=row.value * factor,
        )
        for row in table.rows
    ]
    # sorted() is stable, so equal starts keep their file order
    samples = sorted(samples, key=lambda s: s.start.timestamp())

    notes = []
    if table.values_are_power:
        unit_label = "kW (converted to kWh)"
        notes.append(
            f"Values read as power (kW) and converted to kWh per {interval_minutes}-minute "
            f"interval (x {factor:g})"
        )
    else:
        unit_label = "kWh"
        notes.append("Values read as energy per interval (kWh)")

    if table.watt_annotation:
        notes.append("Export marks values as measured in W")

    return LoadProfile(
        samples=samples,
        row_count=len(samples),
        total_energy_kwh=sum(s.energy_kwh for s in samples),
        range_start=samples[0].start if samples else None,
        range_end=samples[-1].end if samples else None,
        unit_label=unit_label,
        notes=notes,
    )


def read_load_profile(path: Path) -> str:
    """Read an export file as text (UTF-8 with optional BOM, else Latin-1)."""
    data = Path(path).read_bytes()
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def load_profile_from_file(path: Path) -> LoadProfile:
    """Read, ingest and normalize a load-profile export file."""
    return normalize(ingest(read_load_profile(path)))
