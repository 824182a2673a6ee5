"""
Comparable Selection for the Price Estimator

Two independent similarity filters:
- Comparable set (map view): living area window, year built window,
  exact bedrooms, exact garage capacity
- Distribution cohort (histogram): living area window only

Keep these separate. The histogram wants broad context, the map wants a
tight cohort, and their tolerances must not drift together.
"""

from typing import Callable, Final, Tuple

from .dataset import HousingDataset
from .models import HouseRecord, QueryFeatures


# =============================================================================
# Configuration Constants
# =============================================================================

# Living area tolerance (sqft)
LIVING_AREA_TOLERANCE = 200

# Year built tolerance (years)
YEAR_BUILT_TOLERANCE = 5

# Distribution cohort living area tolerance (sqft, open window)
COHORT_LIVING_AREA_TOLERANCE = 200


# =============================================================================
# Comparable Predicates
# =============================================================================


def within_living_area(record: HouseRecord, query: QueryFeatures) -> bool:
    """Living area within the closed tolerance window."""
    return abs(record.living_area - query.living_area) <= LIVING_AREA_TOLERANCE


def within_year_built(record: HouseRecord, query: QueryFeatures) -> bool:
    """Year built within the closed tolerance window."""
    return abs(record.year_built - query.year_built) <= YEAR_BUILT_TOLERANCE


def same_bedrooms(record: HouseRecord, query: QueryFeatures) -> bool:
    """Bedroom count must match exactly."""
    return record.bedrooms == query.bedrooms


def same_garage_cars(record: HouseRecord, query: QueryFeatures) -> bool:
    """Garage capacity must match exactly."""
    return record.garage_cars == query.garage_cars


Predicate = Callable[[HouseRecord, QueryFeatures], bool]

COMPARABLE_PREDICATES: Final[Tuple[Predicate, ...]] = (
    within_living_area,
    within_year_built,
    same_bedrooms,
    same_garage_cars,
)


# =============================================================================
# Selectors
# =============================================================================


def select_comparables(
    dataset: HousingDataset,
    query: QueryFeatures,
) -> Tuple[HouseRecord, ...]:
    """
    Select the tight comparable set for the map view.

    A record must pass ALL comparable predicates. An empty result is a
    valid outcome.

    Args:
        dataset: Reference sales
        query: Validated query

    Returns:
        Matching records, in dataset order
    """
    return tuple(
        record for record in dataset
        if all(predicate(record, query) for predicate in COMPARABLE_PREDICATES)
    )


def select_distribution_cohort(
    dataset: HousingDataset,
    query: QueryFeatures,
) -> Tuple[HouseRecord, ...]:
    """
    Select the living-area cohort for the price distribution.

    Only living area is compared, using an open window (strictly less
    than the tolerance).

    Args:
        dataset: Reference sales
        query: Validated query

    Returns:
        Matching records, in dataset order
    """
    return tuple(
        record for record in dataset
        if abs(record.living_area - query.living_area) < COHORT_LIVING_AREA_TOLERANCE
    )
