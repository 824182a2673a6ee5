"""
Regression Model for the Price Estimator

Ordinary least squares of sale price on a fixed, ordered feature set.
Fitted once at startup; coefficients never change afterwards.

Predictions are not clamped. Extreme inputs can score negative prices,
which is the plain OLS behaviour.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from .dataset import HousingDataset
from .models import (
    ConfigurationError,
    FEATURE_COLUMNS,
    TARGET_COLUMN,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegressionModel:
    """
    Fitted linear model.

    Attributes:
        intercept: Constant term
        coefficients: One coefficient per FEATURE_COLUMNS entry, same order
        observations: Rows used to fit
        rank: Rank of the design matrix (intercept included)
    """

    intercept: float
    coefficients: tuple[float, ...]
    observations: int
    rank: int

    @classmethod
    def fit(cls, dataset: HousingDataset) -> "RegressionModel":
        """
        Fit sale_price on FEATURE_COLUMNS.

        A rank-deficient design (e.g. fewer rows than features) still fits,
        using the minimum-norm least squares solution.

        Args:
            dataset: Reference sales

        Returns:
            RegressionModel

        Raises:
            ConfigurationError: If the dataset is empty or lacks columns
        """
        missing = dataset.missing_columns
        if missing:
            raise ConfigurationError(
                f"Cannot fit model, missing columns: {', '.join(missing)}"
            )
        if dataset.is_empty:
            raise ConfigurationError("Cannot fit model on an empty dataset")

        features = np.array(
            [[float(getattr(r, c)) for c in FEATURE_COLUMNS] for r in dataset],
            dtype=float,
        )
        target = np.array(
            [float(getattr(r, TARGET_COLUMN)) for r in dataset],
            dtype=float,
        )
        design = np.column_stack([np.ones(len(features)), features])

        solution, _, rank, _ = np.linalg.lstsq(design, target, rcond=None)

        if rank < design.shape[1]:
            logger.warning(
                "Design matrix is rank deficient (rank %d of %d, %d rows); "
                "using minimum-norm solution",
                rank,
                design.shape[1],
                len(features),
            )

        return cls(
            intercept=float(solution[0]),
            coefficients=tuple(float(c) for c in solution[1:]),
            observations=len(features),
            rank=int(rank),
        )

    def predict(self, features: Any) -> float:
        """
        Score one feature vector.

        Args:
            features: Any object exposing FEATURE_COLUMNS as attributes
                (QueryFeatures or HouseRecord)

        Returns:
            Predicted sale price

        Raises:
            ValueError: If a feature is absent or not numeric
        """
        vector = feature_vector(features)
        return self.intercept + sum(
            c * v for c, v in zip(self.coefficients, vector)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "intercept": self.intercept,
            "coefficients": dict(zip(FEATURE_COLUMNS, self.coefficients)),
            "observations": self.observations,
            "rank": self.rank,
        }


def feature_vector(features: Any) -> list[float]:
    """Extract FEATURE_COLUMNS from an object, in model order."""
    vector = []
    for name in FEATURE_COLUMNS:
        value = getattr(features, name, None)
        if value is None or isinstance(value, bool):
            raise ValueError(f"Feature vector is missing {name}")
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Feature {name} is not finite")
        vector.append(value)
    return vector
