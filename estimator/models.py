"""
Data models for the Price Estimator

Defines historical sale records, estimation requests, engine state and
the view payloads produced for each estimate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Optional


# =============================================================================
# Feature Columns
# =============================================================================

# Regression features, in fit order
FEATURE_COLUMNS: Final[tuple[str, ...]] = (
    "living_area",
    "year_built",
    "year_remodeled",
    "bedrooms",
    "garage_cars",
    "garage_area",
    "lot_area",
    "full_baths",
    "half_baths",
    "fireplaces",
    "pool_area",
    "basement_area",
)

TARGET_COLUMN: Final[str] = "sale_price"

REQUIRED_COLUMNS: Final[tuple[str, ...]] = FEATURE_COLUMNS + (TARGET_COLUMN,)


# =============================================================================
# Exceptions
# =============================================================================


class ValidationError(ValueError):
    """Raised when estimation input is missing or not numeric."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Invalid estimation input: {'; '.join(errors)}")


class ConfigurationError(Exception):
    """Raised when the dataset cannot support a fitted engine."""

    pass


# =============================================================================
# Engine State
# =============================================================================


class EngineState(Enum):
    """
    Lifecycle of an estimation engine.

    IDLE -> ESTIMATING -> READY -> ESTIMATING -> READY ...
    There is no error state: rejected input never changes state.
    """

    IDLE = "idle"
    ESTIMATING = "estimating"
    READY = "ready"


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class HouseRecord:
    """
    A historical sale from the reference dataset.

    Coordinates are optional; everything else is required.
    """

    living_area: float
    year_built: int
    year_remodeled: int
    bedrooms: int
    garage_cars: int
    garage_area: float
    lot_area: float
    full_baths: int
    half_baths: int
    fireplaces: int
    pool_area: float
    basement_area: float
    sale_price: float

    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self):
        """Validate record invariants."""
        if self.living_area <= 0:
            raise ValueError("living_area must be positive")
        if self.lot_area <= 0:
            raise ValueError("lot_area must be positive")
        if self.sale_price <= 0:
            raise ValueError("sale_price must be positive")
        if self.year_remodeled < self.year_built:
            raise ValueError("year_remodeled must be >= year_built")
        for name in (
            "bedrooms",
            "garage_cars",
            "garage_area",
            "full_baths",
            "half_baths",
            "fireplaces",
            "pool_area",
            "basement_area",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    @property
    def has_coordinates(self) -> bool:
        """Whether both latitude and longitude are known."""
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class QueryFeatures:
    """
    One estimation request.

    Same feature attributes as HouseRecord, without price or location.
    Build through validate_query() when the values come from a user.
    """

    living_area: float
    year_built: int
    year_remodeled: int
    bedrooms: int
    garage_cars: int
    garage_area: float
    lot_area: float
    full_baths: int
    half_baths: int
    fireplaces: int
    pool_area: float
    basement_area: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {name: getattr(self, name) for name in FEATURE_COLUMNS}


# =============================================================================
# View Payloads
# =============================================================================


@dataclass(frozen=True)
class HistogramBucket:
    """Sale price bucket (lower, upper]."""

    lower: float
    upper: float
    count: int


@dataclass(frozen=True)
class DistributionPayload:
    """Sale price histogram over the living-area cohort."""

    buckets: tuple[HistogramBucket, ...]
    bin_width: float
    marker_value: float  # Predicted price

    @property
    def total_count(self) -> int:
        """Sum of bucket counts."""
        return sum(b.count for b in self.buckets)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "bin_width": self.bin_width,
            "marker_value": self.marker_value,
            "total_count": self.total_count,
            "buckets": [
                {"lower": b.lower, "upper": b.upper, "count": b.count}
                for b in self.buckets
            ],
        }


@dataclass(frozen=True)
class ScatterPoint:
    """A (living area, price) pair."""

    living_area: float
    sale_price: float


@dataclass(frozen=True)
class ScatterPayload:
    """Price vs living area for the whole dataset plus the estimate."""

    points: tuple[ScatterPoint, ...]
    highlight: ScatterPoint

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "points": [[p.living_area, p.sale_price] for p in self.points],
            "highlight": [self.highlight.living_area, self.highlight.sale_price],
        }


@dataclass(frozen=True)
class MapMarker:
    """A single map marker with hover label and popup details."""

    latitude: float
    longitude: float
    label: str
    details: dict[str, Any] = field(default_factory=dict)
    highlighted: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "label": self.label,
            "details": dict(self.details),
            "highlighted": self.highlighted,
        }


@dataclass(frozen=True)
class MapPayload:
    """
    Map of comparable houses.

    When is_fallback is True, markers holds exactly one "no data" marker
    at the fallback centroid and message explains why.
    """

    markers: tuple[MapMarker, ...]
    is_fallback: bool = False
    message: str = ""

    @property
    def highlighted_marker(self) -> Optional[MapMarker]:
        """The estimated-house marker, if present."""
        for marker in self.markers:
            if marker.highlighted:
                return marker
        return None

    @property
    def comparable_markers(self) -> list[MapMarker]:
        """Markers for comparable sales (excludes highlight and fallback)."""
        if self.is_fallback:
            return []
        return [m for m in self.markers if not m.highlighted]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "is_fallback": self.is_fallback,
            "message": self.message,
            "markers": [m.to_dict() for m in self.markers],
        }


@dataclass(frozen=True)
class EstimationViews:
    """The three view payloads derived from one estimate."""

    distribution: DistributionPayload
    scatter: ScatterPayload
    map: MapPayload


# =============================================================================
# Estimation Result
# =============================================================================


@dataclass(frozen=True)
class EstimationResult:
    """
    Complete output of one estimation trigger.

    comparables is the tight comparable set (map view); distribution_cohort
    is the looser living-area cohort (histogram). Either may be empty.
    """

    query: QueryFeatures
    predicted_price: float
    formatted_price: str
    comparables: tuple[HouseRecord, ...]
    distribution_cohort: tuple[HouseRecord, ...]
    views: Optional[EstimationViews] = None

    @property
    def comparable_count(self) -> int:
        """Number of comparables in the tight set."""
        return len(self.comparables)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data: dict[str, Any] = {
            "query": self.query.to_dict(),
            "predicted_price": self.predicted_price,
            "formatted_price": self.formatted_price,
            "comparable_count": self.comparable_count,
            "distribution_cohort_size": len(self.distribution_cohort),
        }
        if self.views is not None:
            data["distribution_payload"] = self.views.distribution.to_dict()
            data["scatter_payload"] = self.views.scatter.to_dict()
            data["map_payload"] = self.views.map.to_dict()
        return data
