"""
Tests for the estimation engine.

Covers:
- IDLE -> ESTIMATING -> READY lifecycle
- Rejected input leaves state and previous result untouched
- Single-sale scenario: one comparable, highlight at its position
- No-match scenario: map fallback, histogram and scatter still built
- has_fireplace=false reaches the model as 0 fireplaces
- Idempotent, deterministic results
- Highlighted map price: the user's query by default, the first
  comparable's own score when the legacy display is enabled
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from estimator import (
    ConfigurationError,
    EngineState,
    EstimationEngine,
    HousingDataset,
    RegressionModel,
    ValidationError,
)
from estimator.payloads import FALLBACK_LATITUDE, FALLBACK_LONGITUDE, NO_DATA_MESSAGE


# =============================================================================
# Test Fixtures
# =============================================================================

class RecordingModel:
    """Model double that records what it is asked to score."""

    def __init__(self, price: float = 150000.0):
        self.price = price
        self.calls = []

    def predict(self, features) -> float:
        self.calls.append(features)
        return self.price


@pytest.fixture
def engine(sample_dataset, sample_model):
    return EstimationEngine(sample_dataset, sample_model)


@pytest.fixture
def single_sale(make_record):
    return make_record(
        living_area=1500,
        year_built=2000,
        bedrooms=3,
        garage_cars=2,
        sale_price=200000,
        latitude=42.0,
        longitude=-93.6,
    )


# =============================================================================
# Test: Lifecycle
# =============================================================================

class TestEngineLifecycle:
    """Tests for engine state transitions."""

    def test_starts_idle(self, engine):
        assert engine.state == EngineState.IDLE
        assert engine.result is None

    def test_estimate_moves_to_ready(self, engine, form_input):
        result = engine.estimate(form_input)

        assert engine.state == EngineState.READY
        assert engine.result is result

    def test_latest_result_wins(self, engine, form_input):
        first = engine.estimate(form_input)
        second = engine.estimate(dict(form_input, living_area="2400"))

        assert engine.result is second
        assert second.predicted_price != first.predicted_price

    def test_invalid_input_from_idle_stays_idle(self, engine, form_input):
        with pytest.raises(ValidationError):
            engine.estimate(dict(form_input, living_area="big"))

        assert engine.state == EngineState.IDLE
        assert engine.result is None

    def test_invalid_input_keeps_previous_result(self, engine, form_input):
        previous = engine.estimate(form_input)

        with pytest.raises(ValidationError):
            engine.estimate(dict(form_input, bedrooms=""))

        assert engine.state == EngineState.READY
        assert engine.result is previous

    def test_invalid_input_never_reaches_model(self, sample_dataset, form_input):
        model = RecordingModel()
        engine = EstimationEngine(sample_dataset, model)

        with pytest.raises(ValidationError):
            engine.estimate(dict(form_input, garage_cars=None))

        assert model.calls == []

    def test_from_dataset_fits_model(self, sample_dataset):
        engine = EstimationEngine.from_dataset(sample_dataset)

        assert engine.model.observations == len(sample_dataset)
        assert engine.dataset is sample_dataset

    def test_from_empty_dataset_raises(self):
        with pytest.raises(ConfigurationError):
            EstimationEngine.from_dataset(HousingDataset.from_records([]))


# =============================================================================
# Test: Pipeline Output
# =============================================================================

class TestEstimate:
    """Tests for a single estimate run."""

    def test_result_carries_all_views(self, engine, form_input):
        result = engine.estimate(form_input)

        assert result.views is not None
        assert result.views.distribution.marker_value == result.predicted_price
        assert result.views.scatter.highlight.sale_price == result.predicted_price
        assert len(result.views.scatter.points) == len(engine.dataset)

    def test_predicted_price_matches_model(self, engine, sample_model, make_query):
        query = make_query()

        result = engine.estimate(query)

        assert result.predicted_price == sample_model.predict(query)

    def test_formatted_price(self, sample_dataset, make_query):
        engine = EstimationEngine(sample_dataset, RecordingModel(price=181234.49))

        result = engine.estimate(make_query())

        assert result.formatted_price == "$181,234"

    def test_negative_price_is_not_clamped(self, sample_dataset, make_query):
        engine = EstimationEngine(sample_dataset, RecordingModel(price=-5400.0))

        result = engine.estimate(make_query())

        assert result.predicted_price == -5400.0
        assert result.formatted_price == "-$5,400"

    def test_distribution_counts_match_loose_cohort(self, engine, form_input):
        result = engine.estimate(form_input)

        assert result.views.distribution.total_count == len(result.distribution_cohort)

    def test_has_fireplace_false_scores_zero_fireplaces(self, sample_dataset, form_input):
        model = RecordingModel()
        engine = EstimationEngine(sample_dataset, model)

        engine.estimate(dict(form_input, has_fireplace=False))

        assert model.calls[0].fireplaces == 0

    def test_estimate_is_idempotent(self, engine, form_input):
        first = engine.estimate(form_input)
        second = engine.estimate(form_input)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_dataset_unchanged_by_estimate(self, engine, form_input):
        records = engine.dataset.records

        engine.estimate(form_input)

        assert engine.dataset.records is records


# =============================================================================
# Test: Scenarios
# =============================================================================

class TestScenarios:
    """End-to-end scenarios over small datasets."""

    def test_single_sale_identical_query(self, single_sale, make_query):
        dataset = HousingDataset.from_records([single_sale])
        engine = EstimationEngine.from_dataset(dataset)

        result = engine.estimate(make_query())

        assert result.comparables == (single_sale,)
        map_payload = result.views.map
        assert not map_payload.is_fallback
        assert len(map_payload.comparable_markers) == 1
        highlight = map_payload.highlighted_marker
        assert highlight is not None
        assert (highlight.latitude, highlight.longitude) == (42.0, -93.6)
        assert len(map_payload.markers) == 2

    def test_no_matching_bedrooms(self, engine, form_input):
        result = engine.estimate(dict(form_input, bedrooms="99"))

        assert result.comparables == ()
        map_payload = result.views.map
        assert map_payload.is_fallback
        assert len(map_payload.markers) == 1
        assert map_payload.markers[0].latitude == FALLBACK_LATITUDE
        assert map_payload.markers[0].longitude == FALLBACK_LONGITUDE
        assert map_payload.message == NO_DATA_MESSAGE

        # Histogram and scatter still render
        assert len(result.distribution_cohort) > 0
        assert result.views.distribution.total_count == len(result.distribution_cohort)
        assert len(result.views.scatter.points) == len(engine.dataset)

    def test_ungeocoded_comparable_triggers_fallback(self, single_sale, make_record, make_query):
        dataset = HousingDataset.from_records([
            single_sale,
            make_record(latitude=None, longitude=None, sale_price=210000),
        ])
        engine = EstimationEngine(dataset, RecordingModel())

        result = engine.estimate(make_query())

        assert len(result.comparables) == 2
        assert result.views.map.is_fallback


# =============================================================================
# Test: Highlighted Map Price
# =============================================================================

class TestHighlightedMapPrice:
    """
    The highlighted map marker's price.

    Labelled with the user's estimate by default. With
    score_first_comparable set, it carries the legacy label: the model's
    price for the first comparable's own features, not the user's query.
    """

    @pytest.fixture
    def dataset(self, make_record):
        return HousingDataset.from_records([
            make_record(living_area=1450, lot_area=12000, sale_price=190000),
            make_record(living_area=1550, lot_area=6000, sale_price=205000),
        ])

    def test_default_labels_user_estimate(self, dataset, make_query):
        engine = EstimationEngine(dataset, RecordingModel(price=150000.0))

        result = engine.estimate(make_query())

        assert result.views.map.highlighted_marker.label == "Estimated Price: $150,000"

    def test_legacy_labels_first_comparable_score(self, dataset, make_query):
        class FeatureModel:
            def predict(self, features):
                return features.living_area * 100

        engine = EstimationEngine(dataset, FeatureModel(), score_first_comparable=True)

        result = engine.estimate(make_query(living_area=1500.0))

        assert result.predicted_price == 150000.0
        first = result.comparables[0]
        assert result.views.map.highlighted_marker.label == (
            f"Estimated Price: ${first.living_area * 100:,.0f}"
        )
        assert result.views.map.highlighted_marker.label != "Estimated Price: $150,000"

    def test_legacy_mode_with_no_comparables_falls_back(self, dataset, make_query):
        engine = EstimationEngine(dataset, RecordingModel(), score_first_comparable=True)

        result = engine.estimate(make_query(bedrooms=7))

        assert result.views.map.is_fallback

    def test_legacy_highlight_uses_fitted_model(self, dataset, make_query):
        model = RegressionModel.fit(HousingDataset.from_records(dataset.records))
        query = make_query(living_area=1500.0)

        default = EstimationEngine(dataset, model).estimate(query)
        legacy = EstimationEngine(dataset, model, score_first_comparable=True).estimate(query)

        assert default.predicted_price == legacy.predicted_price
        assert legacy.views.map.highlighted_marker.details["price"] == pytest.approx(
            model.predict(legacy.comparables[0])
        )
