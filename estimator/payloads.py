"""
View Payload Builders

Renderer-agnostic payloads for the three result views:
- Distribution: sale price histogram over the living-area cohort
- Scatter: living area vs price for every sale, estimate highlighted
- Map: comparable houses, or a single "no data" marker

Builders are pure. They never mutate the dataset or the result.
"""

import math
from typing import Optional

from utils.formatting import format_currency

from .dataset import HousingDataset
from .models import (
    DistributionPayload,
    EstimationResult,
    HistogramBucket,
    MapMarker,
    MapPayload,
    ScatterPayload,
    ScatterPoint,
)


# =============================================================================
# Configuration Constants
# =============================================================================

# Histogram bin width (currency units)
HISTOGRAM_BIN_WIDTH = 20_000

# Approximate centroid of Ames, Iowa
FALLBACK_LATITUDE = 42.03
FALLBACK_LONGITUDE = -93.65

NO_DATA_MESSAGE = "No similar houses found with location data."


# =============================================================================
# Distribution
# =============================================================================


def build_distribution_payload(
    result: EstimationResult,
    bin_width: float = HISTOGRAM_BIN_WIDTH,
) -> DistributionPayload:
    """
    Bucket cohort sale prices into fixed-width bins.

    Bins are centred on multiples of bin_width and closed on the right,
    (lower, upper], the way ggplot2 bins a histogram by default. The
    lowest bin also takes a price sitting on its lower edge. Bins cover
    the cohort's price range contiguously, so interior empty bins are kept.

    Args:
        result: Estimation result carrying the distribution cohort
        bin_width: Width of each price bucket

    Returns:
        DistributionPayload with the predicted price as marker
    """
    prices = [r.sale_price for r in result.distribution_cohort]

    buckets = []
    if prices:
        half = bin_width / 2
        first = math.floor((min(prices) - half) / bin_width)
        indexes = [
            max(first, math.ceil((price - half) / bin_width) - 1)
            for price in prices
        ]
        counts = [0] * (max(indexes) - first + 1)
        for index in indexes:
            counts[index - first] += 1
        buckets = [
            HistogramBucket(
                lower=(first + i) * bin_width + half,
                upper=(first + i + 1) * bin_width + half,
                count=count,
            )
            for i, count in enumerate(counts)
        ]

    return DistributionPayload(
        buckets=tuple(buckets),
        bin_width=bin_width,
        marker_value=result.predicted_price,
    )


# =============================================================================
# Scatter
# =============================================================================


def build_scatter_payload(
    result: EstimationResult,
    dataset: HousingDataset,
) -> ScatterPayload:
    """
    Pair living area with sale price for every sale in the dataset.

    The highlighted point is the query's living area at the predicted price.
    """
    return ScatterPayload(
        points=tuple(
            ScatterPoint(living_area=r.living_area, sale_price=r.sale_price)
            for r in dataset
        ),
        highlight=ScatterPoint(
            living_area=result.query.living_area,
            sale_price=result.predicted_price,
        ),
    )


# =============================================================================
# Map
# =============================================================================


def build_map_payload(
    result: EstimationResult,
    highlight_price: Optional[float] = None,
) -> MapPayload:
    """
    Build the comparable-houses map.

    Fallback is all-or-nothing: if there are no comparables, or ANY
    comparable lacks coordinates, the payload is one "no data" marker at
    the fallback centroid.

    Otherwise there is one marker per comparable plus one highlighted
    marker at the comparables' mean position.

    Args:
        result: Estimation result carrying the comparable set
        highlight_price: Price shown on the highlighted marker
            (default: the result's predicted price)

    Returns:
        MapPayload
    """
    comparables = result.comparables

    if not comparables or not all(r.has_coordinates for r in comparables):
        return MapPayload(
            markers=(
                MapMarker(
                    latitude=FALLBACK_LATITUDE,
                    longitude=FALLBACK_LONGITUDE,
                    label=NO_DATA_MESSAGE,
                ),
            ),
            is_fallback=True,
            message=NO_DATA_MESSAGE,
        )

    markers = [
        MapMarker(
            latitude=r.latitude,
            longitude=r.longitude,
            label=f"Price: {format_currency(r.sale_price)}",
            details={
                "price": r.sale_price,
                "living_area": r.living_area,
                "bedrooms": r.bedrooms,
                "year_built": r.year_built,
            },
        )
        for r in comparables
    ]

    if highlight_price is None:
        highlight_price = result.predicted_price

    markers.append(
        MapMarker(
            latitude=sum(r.latitude for r in comparables) / len(comparables),
            longitude=sum(r.longitude for r in comparables) / len(comparables),
            label=f"Estimated Price: {format_currency(highlight_price)}",
            details={
                "title": "Estimated House",
                "price": highlight_price,
                "living_area": result.query.living_area,
            },
            highlighted=True,
        )
    )

    return MapPayload(markers=tuple(markers))
