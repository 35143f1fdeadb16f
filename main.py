"""
Clinic Records - patient and visit history web application
FastAPI entry point
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_config
from controllers import pages_controller, patient_controller
from database.connection import Database
from utils.error_handlers import register_error_handlers
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    database: Database = app.state.database
    await database.connect()
    await database.create_tables()
    logger.info("Clinic Records started (%s)", app.state.config.ENVIRONMENT)
    yield
    # Shutdown
    await database.disconnect()
    logger.info("Clinic Records shut down")


def create_app(config_name: str = None, database: Database = None) -> FastAPI:
    config = get_config(config_name)
    configure_logging(config)

    app = FastAPI(
        title="Clinic Records",
        description="Patient records and visit history",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.database = database or Database(config.DATABASE_URL, echo=config.SQL_ECHO)

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health Check
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "version": "1.0.0",
            "service": "Clinic Records",
        }

    # Patient list API
    app.include_router(patient_controller.router, prefix="/api/patients", tags=["Patients"])

    # Pages and form actions
    app.include_router(pages_controller.router, tags=["Pages"])

    register_error_handlers(app)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
