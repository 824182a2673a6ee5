"""
Estimation Engine for the Price Estimator

Pipeline order, run synchronously on each estimate trigger:
1. VALIDATE - Reject missing or non-numeric input (state unchanged)
2. SCORE - Predict the sale price with the fitted model
3. COMPARE - Select the tight comparable set (map view)
4. COHORT - Select the living-area cohort (histogram)
5. PRESENT - Build view payloads and the formatted price
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from utils.formatting import format_currency

from .dataset import HousingDataset
from .filters import select_comparables, select_distribution_cohort
from .models import (
    EngineState,
    EstimationResult,
    EstimationViews,
    QueryFeatures,
)
from .payloads import (
    build_distribution_payload,
    build_map_payload,
    build_scatter_payload,
)
from .regression import RegressionModel
from .validation import ensure_valid_query, validate_query


logger = logging.getLogger(__name__)


class EstimationEngine:
    """
    Single-session estimation engine.

    Holds a read-only (dataset, model) pair and the latest result.
    The pair may be shared between engines; neither is ever mutated.
    """

    def __init__(
        self,
        dataset: HousingDataset,
        model: RegressionModel,
        score_first_comparable: bool = False,
    ):
        """
        Initialize engine.

        Args:
            dataset: Reference sales
            model: Model already fitted on dataset
            score_first_comparable: Label the highlighted map marker with the
                model's price for the first comparable's own features instead
                of the user's query (legacy display behaviour)
        """
        self._dataset = dataset
        self._model = model
        self._score_first_comparable = score_first_comparable
        self._state = EngineState.IDLE
        self._result: Optional[EstimationResult] = None

    @classmethod
    def from_dataset(
        cls,
        dataset: HousingDataset,
        score_first_comparable: bool = False,
    ) -> "EstimationEngine":
        """
        Fit a model on dataset and build an engine around both.

        Raises:
            ConfigurationError: If the dataset cannot be fitted
        """
        model = RegressionModel.fit(dataset)
        logger.info(
            "Fitted price model on %d sales (rank %d)",
            model.observations,
            model.rank,
        )
        return cls(dataset, model, score_first_comparable=score_first_comparable)

    @property
    def dataset(self) -> HousingDataset:
        return self._dataset

    @property
    def model(self) -> RegressionModel:
        return self._model

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def result(self) -> Optional[EstimationResult]:
        """Latest result, or None while IDLE."""
        return self._result

    def estimate(
        self,
        query: Union[QueryFeatures, Mapping[str, Any]],
    ) -> EstimationResult:
        """
        Run one estimation.

        Args:
            query: QueryFeatures, or raw input values to validate

        Returns:
            EstimationResult, which also becomes the engine's latest result

        Raises:
            ValidationError: If input is invalid; state and the previous
                result are left as they were
        """
        # Step 1: Validate (before any state change)
        if isinstance(query, QueryFeatures):
            features = ensure_valid_query(query)
        else:
            features = validate_query(query)

        previous_state = self._state
        self._state = EngineState.ESTIMATING
        try:
            result = self._run(features)
        except Exception:
            self._state = previous_state
            raise

        self._result = result
        self._state = EngineState.READY
        return result

    def _run(self, features: QueryFeatures) -> EstimationResult:
        # Step 2: Score
        predicted_price = self._model.predict(features)

        # Step 3: Tight comparable set
        comparables = select_comparables(self._dataset, features)

        # Step 4: Living-area cohort
        cohort = select_distribution_cohort(self._dataset, features)

        result = EstimationResult(
            query=features,
            predicted_price=predicted_price,
            formatted_price=format_currency(predicted_price),
            comparables=comparables,
            distribution_cohort=cohort,
        )

        # Step 5: View payloads
        highlight_price = None
        if self._score_first_comparable and comparables:
            highlight_price = self._model.predict(comparables[0])

        views = EstimationViews(
            distribution=build_distribution_payload(result),
            scatter=build_scatter_payload(result, self._dataset),
            map=build_map_payload(result, highlight_price=highlight_price),
        )

        logger.debug(
            "Estimated %s with %d comparables and cohort of %d",
            result.formatted_price,
            len(comparables),
            len(cohort),
        )

        return replace(result, views=views)
