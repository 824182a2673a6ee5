"""
Container entrypoint for the Ames Price Estimator.

Binds to 0.0.0.0:$PORT. The dataset is loaded and the model fitted
before the server starts accepting requests.
"""

import logging
import os

import uvicorn

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    print(f"Starting Ames Price Estimator on port {port}")

    # Import app factory here to ensure clean module loading
    from web.app import create_app

    uvicorn.run(create_app(), host="0.0.0.0", port=port)
