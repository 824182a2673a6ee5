"""
Price Estimator v1.0

Linear-regression sale price estimates for Ames, Iowa houses, presented
against comparable sales: a price distribution, a price vs living area
scatter and a map of similar houses.

Data Source: Ames Housing dataset (completed sales)
"""

from .models import (
    HouseRecord,
    QueryFeatures,
    EstimationResult,
    EstimationViews,
    EngineState,
    DistributionPayload,
    ScatterPayload,
    MapPayload,
    ValidationError,
    ConfigurationError,
)
from .dataset import HousingDataset, load_dataset
from .regression import RegressionModel
from .filters import select_comparables, select_distribution_cohort
from .validation import validate_query
from .engine import EstimationEngine

__all__ = [
    # Models
    "HouseRecord",
    "QueryFeatures",
    "EstimationResult",
    "EstimationViews",
    "EngineState",
    "DistributionPayload",
    "ScatterPayload",
    "MapPayload",
    # Errors
    "ValidationError",
    "ConfigurationError",
    # Data
    "HousingDataset",
    "load_dataset",
    # Engine
    "RegressionModel",
    "select_comparables",
    "select_distribution_cohort",
    "validate_query",
    "EstimationEngine",
]

__version__ = "1.0"
