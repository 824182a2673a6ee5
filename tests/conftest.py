"""
Shared fixtures for the price estimator tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from estimator import HouseRecord, HousingDataset, QueryFeatures, RegressionModel


# True coefficients for the noise-free dataset, in FEATURE_COLUMNS order
TRUE_INTERCEPT = -1_500_000.0
TRUE_COEFFICIENTS = (
    60.0,      # living_area
    700.0,     # year_built
    300.0,     # year_remodeled
    -4_000.0,  # bedrooms
    9_000.0,   # garage_cars
    25.0,      # garage_area
    0.8,       # lot_area
    6_000.0,   # full_baths
    3_000.0,   # half_baths
    7_500.0,   # fireplaces
    15.0,      # pool_area
    30.0,      # basement_area
)


def generate_records(count: int, seed: int, noise: float = 0.0) -> list[HouseRecord]:
    """Deterministic synthetic sales around Ames, Iowa."""
    rng = np.random.default_rng(seed)
    records = []
    for _ in range(count):
        year_built = int(rng.integers(1950, 2010))
        features = {
            "living_area": float(rng.integers(800, 3000)),
            "year_built": year_built,
            "year_remodeled": year_built + int(rng.integers(0, 10)),
            "bedrooms": int(rng.integers(1, 6)),
            "garage_cars": int(rng.integers(0, 4)),
            "garage_area": float(rng.integers(0, 900)),
            "lot_area": float(rng.integers(3000, 20000)),
            "full_baths": int(rng.integers(1, 4)),
            "half_baths": int(rng.integers(0, 3)),
            "fireplaces": int(rng.integers(0, 3)),
            "pool_area": float(rng.choice([0, 0, 0, 400, 600])),
            "basement_area": float(rng.integers(0, 2000)),
        }
        price = TRUE_INTERCEPT + sum(
            c * v for c, v in zip(TRUE_COEFFICIENTS, features.values())
        )
        price += float(rng.normal(0, noise)) if noise else 0.0
        records.append(HouseRecord(
            **features,
            sale_price=max(price, 10_000.0),
            latitude=42.0 + float(rng.uniform(-0.03, 0.03)),
            longitude=-93.65 + float(rng.uniform(-0.05, 0.05)),
        ))
    return records


@pytest.fixture
def make_record():
    """Factory fixture for creating house records."""
    def _create(
        living_area: float = 1500,
        year_built: int = 2000,
        year_remodeled: int = 2005,
        bedrooms: int = 3,
        garage_cars: int = 2,
        garage_area: float = 400,
        lot_area: float = 8000,
        full_baths: int = 2,
        half_baths: int = 1,
        fireplaces: int = 1,
        pool_area: float = 0,
        basement_area: float = 800,
        sale_price: float = 200000,
        latitude: float = 42.0,
        longitude: float = -93.6,
    ) -> HouseRecord:
        return HouseRecord(
            living_area=living_area,
            year_built=year_built,
            year_remodeled=year_remodeled,
            bedrooms=bedrooms,
            garage_cars=garage_cars,
            garage_area=garage_area,
            lot_area=lot_area,
            full_baths=full_baths,
            half_baths=half_baths,
            fireplaces=fireplaces,
            pool_area=pool_area,
            basement_area=basement_area,
            sale_price=sale_price,
            latitude=latitude,
            longitude=longitude,
        )
    return _create


@pytest.fixture
def make_query():
    """Factory fixture for creating queries."""
    def _create(**overrides) -> QueryFeatures:
        values = {
            "living_area": 1500.0,
            "year_built": 2000,
            "year_remodeled": 2005,
            "bedrooms": 3,
            "garage_cars": 2,
            "garage_area": 400.0,
            "lot_area": 8000.0,
            "full_baths": 2,
            "half_baths": 1,
            "fireplaces": 1,
            "pool_area": 0.0,
            "basement_area": 800.0,
        }
        values.update(overrides)
        return QueryFeatures(**values)
    return _create


@pytest.fixture
def form_input():
    """Raw form values as the browser submits them."""
    return {
        "living_area": "1500",
        "year_built": "2000",
        "year_remodeled": "2005",
        "bedrooms": "3",
        "garage_cars": "2",
        "garage_area": "400",
        "full_baths": "2",
        "half_baths": "1",
        "has_fireplace": "true",
        "pool_area": "0",
        "basement_area": "800",
        "lot_area": "8000",
    }


@pytest.fixture
def linear_dataset():
    """Noise-free dataset with a known linear relationship."""
    return HousingDataset.from_records(generate_records(120, seed=11))


@pytest.fixture
def sample_dataset():
    """Noisy dataset resembling real sales."""
    return HousingDataset.from_records(generate_records(300, seed=7, noise=8_000))


@pytest.fixture
def sample_model(sample_dataset):
    """Model fitted on the sample dataset."""
    return RegressionModel.fit(sample_dataset)
