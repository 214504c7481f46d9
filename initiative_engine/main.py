# product_lifecycle_engine/initiative_engine/main.py

from __future__ import annotations

import logging

from fastapi import FastAPI

from initiative_engine.config import setup_json_logging, settings
from initiative_engine.api.routes.initiatives import router as initiatives_router


def create_app() -> FastAPI:
    setup_json_logging(log_level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    app = FastAPI(
        title="PRODUCT INITIATIVE LIFECYCLE ENGINE",
        version="0.1.0",
    )

    app.include_router(initiatives_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
