"""
Housing Dataset - Immutable Reference Table of Historical Sales

Builds the in-memory table the engine reads from. Rows come either from
mappings already in memory or from the Ames housing CSV export.

Rows with a blank required cell, or values that break HouseRecord
invariants, are skipped and counted rather than patched.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Iterable, Iterator, Mapping, Optional, Union

import pandas as pd

from .models import (
    ConfigurationError,
    HouseRecord,
    REQUIRED_COLUMNS,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Column Mapping
# =============================================================================

# Ames CSV header -> HouseRecord field
AMES_COLUMN_MAP: Final[dict[str, str]] = {
    "Gr_Liv_Area": "living_area",
    "Year_Built": "year_built",
    "Year_Remod_Add": "year_remodeled",
    "Bedroom_AbvGr": "bedrooms",
    "Garage_Cars": "garage_cars",
    "Garage_Area": "garage_area",
    "Lot_Area": "lot_area",
    "Full_Bath": "full_baths",
    "Half_Bath": "half_baths",
    "Fireplaces": "fireplaces",
    "Pool_Area": "pool_area",
    "Total_Bsmt_SF": "basement_area",
    "Sale_Price": "sale_price",
    "Latitude": "latitude",
    "Longitude": "longitude",
}

INTEGER_FIELDS: Final[frozenset[str]] = frozenset({
    "year_built",
    "year_remodeled",
    "bedrooms",
    "garage_cars",
    "full_baths",
    "half_baths",
    "fireplaces",
})

COORDINATE_FIELDS: Final[tuple[str, ...]] = ("latitude", "longitude")


# =============================================================================
# Dataset
# =============================================================================


@dataclass(frozen=True)
class HousingDataset:
    """
    Immutable table of historical sales.

    Attributes:
        records: Valid HouseRecords, in source order
        columns: HouseRecord field names present in the source
        skipped_rows: Source rows dropped as incomplete or invalid
    """

    records: tuple[HouseRecord, ...]
    columns: frozenset[str]
    skipped_rows: int = 0

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[HouseRecord]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        """Whether no usable records were loaded."""
        return not self.records

    @property
    def missing_columns(self) -> list[str]:
        """Required columns absent from the source."""
        return [c for c in REQUIRED_COLUMNS if c not in self.columns]

    def distinct_values(self, field_name: str) -> list[Any]:
        """Sorted distinct values of one field, for form choices."""
        return sorted({getattr(r, field_name) for r in self.records})

    @classmethod
    def from_records(cls, records: Iterable[HouseRecord]) -> "HousingDataset":
        """Wrap already-built records. All columns are considered present."""
        fields = set(REQUIRED_COLUMNS) | set(COORDINATE_FIELDS)
        return cls(records=tuple(records), columns=frozenset(fields))

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        column_map: Optional[Mapping[str, str]] = None,
    ) -> "HousingDataset":
        """
        Build a dataset from mapping rows.

        Args:
            rows: One mapping per sale
            column_map: Optional source-name -> field-name mapping
                (e.g. AMES_COLUMN_MAP). Unmapped keys are used as-is.

        Returns:
            HousingDataset

        Raises:
            ConfigurationError: If a required column is absent from every row
        """
        column_map = column_map or {}
        records: list[HouseRecord] = []
        seen_columns: set[str] = set()
        skipped = 0

        for index, raw in enumerate(rows):
            row = {column_map.get(k, k): v for k, v in raw.items()}
            seen_columns.update(k for k, v in row.items() if not _is_missing(v))
            try:
                records.append(_build_record(row))
            except (KeyError, TypeError, ValueError) as e:
                skipped += 1
                logger.debug("Skipping dataset row %d: %s", index, e)

        if records or skipped:
            missing = [c for c in REQUIRED_COLUMNS if c not in seen_columns]
            if missing:
                raise ConfigurationError(
                    f"Dataset is missing required columns: {', '.join(missing)}"
                )

        if skipped:
            logger.warning(
                "Skipped %d of %d dataset rows with missing or invalid values",
                skipped,
                skipped + len(records),
            )

        return cls(
            records=tuple(records),
            columns=frozenset(seen_columns),
            skipped_rows=skipped,
        )


def load_dataset(path: Union[str, Path]) -> HousingDataset:
    """
    Load the Ames housing CSV into a HousingDataset.

    Args:
        path: CSV file with AMES_COLUMN_MAP headers

    Returns:
        HousingDataset

    Raises:
        ConfigurationError: If the file is unreadable or lacks columns
    """
    path = Path(path)
    try:
        frame = pd.read_csv(path)
    except (OSError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise ConfigurationError(f"Unable to read dataset {path}: {e}") from e

    headers = {c: str(c).strip() for c in frame.columns}
    frame = frame.rename(columns={c: AMES_COLUMN_MAP.get(h, h) for c, h in headers.items()})
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise ConfigurationError(
            f"{path} is missing required columns: {', '.join(missing)}"
        )

    dataset = HousingDataset.from_rows(frame.to_dict("records"))
    logger.info("Loaded %d sales from %s", len(dataset), path)
    return dataset


# =============================================================================
# Row Conversion
# =============================================================================


def _is_missing(value: Any) -> bool:
    # pandas reads blank and "NA" cells as NaN
    if value is None:
        return True
    return not isinstance(value, str) and bool(pd.isna(value))


def _to_number(name: str, value: Any) -> Union[int, float]:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} is not finite")
    if name in INTEGER_FIELDS:
        if not number.is_integer():
            raise ValueError(f"{name} must be a whole number")
        return int(number)
    return number


def _build_record(row: Mapping[str, Any]) -> HouseRecord:
    values: dict[str, Any] = {}
    for name in REQUIRED_COLUMNS:
        raw = row[name]
        if _is_missing(raw):
            raise ValueError(f"{name} is missing")
        values[name] = _to_number(name, raw)

    for name in COORDINATE_FIELDS:
        raw = row.get(name)
        values[name] = None if _is_missing(raw) else _to_number(name, raw)

    return HouseRecord(**values)
