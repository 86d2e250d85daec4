# ============================================================================
# WORKFLOW CONTROLLER - MAIN APPLICATION
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - FastAPI application entry point
# PURPOSE: Main application with the controller loop
# CREATED: 19 OCT 2026
# ============================================================================
"""
Workflow Controller Main Application

FastAPI application that:
1. Loads the controller config from its config map
2. Runs the control loop (workflow and pod watches) in the background
3. Provides HTTP endpoints for probes, config and loop status

A watch that cannot be established at startup is fatal: the lifespan
raises and the process exits.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from __version__ import __version__, BUILD_DATE, EPOCH

from core.config import ConfigHolder, get_settings
from core.errors import ConfigurationError
from repositories import (
    init_pool,
    close_pool,
    ensure_schema,
    workflow_repository,
    pod_repository,
    config_map_repository,
    secret_repository,
)
from services import ConfigResynchronizer, PodStatusReconciler
from orchestrator import WorkflowController, LoggingWorkflowOperator
from api.routes import router, set_services

# Health check system
from health import health_router, set_controller

# Configure logging using our structured logging system
from core.logging import configure_logging, get_logger

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)

# Global instances
_controller: WorkflowController = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Initializes services on startup, cleans up on shutdown.
    """
    global _controller

    settings = get_settings()
    logger.info(f"Starting Workflow Controller v{__version__} (Epoch {EPOCH}, Build {BUILD_DATE})")

    # Initialize database pool
    pool = await init_pool()
    logger.info("Database pool initialized")

    # Optional: Bootstrap schema on startup (for development)
    if os.environ.get("AUTO_BOOTSTRAP_SCHEMA", "").lower() == "true":
        logger.info("Auto-bootstrap enabled, deploying schema...")
        await ensure_schema(pool)

    # Resource stores
    workflows = workflow_repository(pool, settings.namespace)
    pods = pod_repository(pool, settings.namespace)
    config_maps = config_map_repository(pool, settings.namespace)
    secrets = secret_repository(pool, settings.namespace)

    # Controller config (defaults until the first successful resync)
    holder = ConfigHolder()
    resynchronizer = ConfigResynchronizer(config_maps, secrets, holder, settings)
    try:
        await resynchronizer.resync()
    except ConfigurationError as e:
        logger.warning(f"Initial config resync failed, using defaults: {e}")

    # Initialize controller
    _controller = WorkflowController(
        workflows,
        pods,
        operator=LoggingWorkflowOperator(),
        reconciler=PodStatusReconciler(workflows),
        settings=settings,
    )

    # Set services for API routes
    set_services(
        controller=_controller,
        config_holder=holder,
        resynchronizer=resynchronizer,
    )
    set_controller(_controller, pool)

    # Start controller
    try:
        await _controller.start()
    except Exception:
        await close_pool()
        raise
    logger.info("Controller started")

    yield

    # Shutdown
    logger.info("Shutting down Workflow Controller...")

    await _controller.stop()
    await close_pool()

    logger.info("Workflow Controller stopped")


# Create FastAPI app
app = FastAPI(
    title="Workflow Controller",
    description=f"Epoch {EPOCH} workflow pod status controller",
    version=__version__,
    lifespan=lifespan,
)

# Include health check routes (no prefix - /livez, /readyz, /health)
app.include_router(health_router)

# Include API routes
app.include_router(router, prefix="/api/v1")


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Workflow Controller",
        "version": __version__,
        "epoch": EPOCH,
        "build_date": BUILD_DATE,
        "status": "running",
        "docs": "/docs",
    }


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
