"""CSV adapter for actual-progress measurement imports."""

from __future__ import annotations

import csv

from loguru import logger

from progress_engine.dates import parse_date
from progress_engine.errors import MalformedDateError, ValidationFailedError
from progress_engine.mutations import MeasurementRow

_REQUIRED_FIELDS = ("task_id", "measurement_date", "progress_percentage")


def _parse_row(row: dict, row_number: int) -> MeasurementRow:
    missing = [field for field in _REQUIRED_FIELDS if not row.get(field)]
    if missing:
        raise ValidationFailedError(missing[0], f"Row {row_number}: missing required fields {missing}")

    try:
        measurement_date = parse_date(row["measurement_date"])
        publication_raw = row.get("publication_date")
        publication_date = parse_date(publication_raw) if publication_raw else None
    except MalformedDateError as exc:
        raise MalformedDateError(exc.value, f"Row {row_number}: malformed date {exc.value!r}") from exc

    try:
        progress = float(row["progress_percentage"])
    except ValueError as exc:
        raise ValidationFailedError("progress_percentage", f"Row {row_number}: invalid progress_percentage") from exc
    if not 0 <= progress <= 1:
        raise ValidationFailedError("progress_percentage", f"Row {row_number}: progress {progress} outside [0, 1]")

    return MeasurementRow(
        task_id=row["task_id"].strip(),
        measurement_date=measurement_date,
        progress_percentage=progress,
        publication_date=publication_date,
    )


def parse(file_path: str) -> list[MeasurementRow]:
    """Parse CSV file into a list of measurement rows."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        rows: list[MeasurementRow] = []
        for row_number, row in enumerate(reader, start=2):
            rows.append(_parse_row(row, row_number))
    logger.debug("Parsed {} measurement rows from {}", len(rows), file_path)
    return rows
