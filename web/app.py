"""
FastAPI application for the price estimator web interface.

One estimation engine per application instance: this is a single-user
tool, so the engine's latest result is the session's result.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from estimator import (
    EstimationEngine,
    HousingDataset,
    ValidationError,
    load_dataset,
)
from estimator import __version__ as ESTIMATOR_VERSION
from estimator.validation import REQUIRED_INPUT_FIELDS
from utils.config import Config
from utils.formatting import format_area, format_currency


logger = logging.getLogger(__name__)

# Paths
BASE_DIR = Path(__file__).parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"


# =============================================================================
# Form Defaults and Choices
# =============================================================================

FORM_DEFAULTS = {
    "living_area": 1500,
    "year_built": 2000,
    "year_remodeled": 2005,
    "bedrooms": 3,
    "garage_cars": 2,
    "garage_area": 400,
    "full_baths": 2,
    "half_baths": 1,
    "has_fireplace": True,
    "pool_area": 0,
    "basement_area": 800,
    "lot_area": 8000,
}

BEDROOM_CHOICES = list(range(0, 11))

GARAGE_CHOICES = [
    (0, "No garage"),
    (1, "1 car"),
    (2, "2 cars"),
    (3, "3 cars"),
    (4, "4+ cars"),
]


def form_choices(dataset: HousingDataset) -> dict:
    """Select options for the estimation form."""
    return {
        "year_built": dataset.distinct_values("year_built"),
        "year_remodeled": dataset.distinct_values("year_remodeled"),
        "bedrooms": BEDROOM_CHOICES,
        "garage_cars": GARAGE_CHOICES,
    }


# =============================================================================
# API Request Models
# =============================================================================

# Left untyped so pydantic never coerces or rejects before validate_query
RawInput = Any


class EstimateRequest(BaseModel):
    """
    Request body for a JSON estimate.

    Values are passed through to the engine's validator untouched, so
    missing or malformed fields are reported the same way as form input.
    """
    living_area: RawInput = None
    year_built: RawInput = None
    year_remodeled: RawInput = None
    bedrooms: RawInput = None
    garage_cars: RawInput = None
    garage_area: RawInput = None
    full_baths: RawInput = None
    half_baths: RawInput = None
    has_fireplace: RawInput = None
    pool_area: RawInput = None
    basement_area: RawInput = None
    lot_area: RawInput = None


def create_app(
    config: Optional[Config] = None,
    dataset: Optional[HousingDataset] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application config (default: loaded from environment)
        dataset: Reference sales (default: loaded from config.data_path)

    Raises:
        ConfigurationError: If the dataset is unusable. The app is never
            created around a partially initialised engine.
    """
    config = config or Config.load()

    if dataset is None:
        dataset = load_dataset(config.data_path)

    engine = EstimationEngine.from_dataset(
        dataset,
        score_first_comparable=config.score_first_comparable,
    )

    app = FastAPI(
        title="Ames Price Estimator",
        description="Sale price estimates with comparable-sales context",
        version=ESTIMATOR_VERSION,
        debug=config.debug,
    )
    app.state.engine = engine

    @app.get("/", include_in_schema=False)
    def root():
        """Root healthcheck. No dependencies, no IO."""
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        """Secondary health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    # Mount static files
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # Templates
    templates = Jinja2Templates(directory=TEMPLATES_DIR)
    templates.env.filters["currency"] = format_currency
    templates.env.filters["area"] = format_area

    choices = form_choices(dataset)

    def render_form(request: Request, values: dict, errors: list, status_code: int = 200):
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "title": "Ames Price Estimator",
                "values": values,
                "choices": choices,
                "errors": errors,
            },
            status_code=status_code,
        )

    @app.get("/app", response_class=HTMLResponse)
    async def index(request: Request):
        """Render the estimation form."""
        return render_form(request, dict(FORM_DEFAULTS), [])

    @app.post("/estimate", response_class=HTMLResponse)
    async def estimate_form(request: Request):
        """Run an estimate from the form and render the three views."""
        form_data = await request.form()
        form_dict = {k: v for k, v in form_data.items() if k in REQUIRED_INPUT_FIELDS}

        # Unchecked checkboxes are not submitted
        form_dict.setdefault("has_fireplace", "false")

        try:
            result = await run_in_threadpool(engine.estimate, form_dict)
        except ValidationError as e:
            logger.info("Rejected estimate form: %s", e)
            return render_form(request, form_dict, e.errors, status_code=400)

        return templates.TemplateResponse(
            request,
            "results.html",
            {
                "title": "Estimate",
                "values": form_dict,
                "choices": choices,
                "errors": [],
                "result": result,
                "payload": result.to_dict(),
            },
        )

    @app.post("/api/estimate")
    def estimate_api(request_data: EstimateRequest):
        """
        Run an estimate from a JSON body.

        Returns:
            - The full EstimationResult (price and all three payloads)
            - 422 with success: false and the error list on invalid input
        """
        try:
            result = engine.estimate(request_data.model_dump())
        except ValidationError as e:
            return JSONResponse(
                {"success": False, "errors": e.errors},
                status_code=422,
            )
        return {"success": True, **result.to_dict()}

    @app.get("/api/estimate/latest")
    def latest_estimate():
        """Return the latest estimate, or 404 before the first one."""
        if engine.result is None:
            return JSONResponse(
                {"success": False, "message": "No estimate has been made yet."},
                status_code=404,
            )
        return {"success": True, **engine.result.to_dict()}

    @app.get("/api/model")
    def model_summary():
        """Fitted model coefficients."""
        return engine.model.to_dict()

    @app.get("/api/health")
    def api_health() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": ESTIMATOR_VERSION,
            "engine_state": engine.state.value,
            "dataset_size": len(dataset),
        }

    logger.info("Ames Price Estimator ready with %d sales", len(dataset))
    return app
