import logging

from fastapi import FastAPI

from src.core.config import config
from src.core.utils.logging import configure_logging
from src.tasks.task_queue import TaskStatus, task_queue
from src.webhooks.dispatcher import dispatcher
from src.webhooks.handlers.push import PushEventHandler
from src.webhooks.router import router as webhook_router

# --- Application Setup ---

configure_logging(config.logging.level, config.logging.format, config.logging.file_path)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lintflow",
    description="ESLint on every push, with automatic fixes.",
    version="0.1.0",
)

# --- Include Routers ---

app.include_router(webhook_router, prefix="/webhooks", tags=["GitHub Webhooks"])

# --- Root Endpoint ---


@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the service is running."""
    return {
        "status": "ok",
        "message": "Lintflow is running.",
        "events": [event_type.value for event_type in dispatcher.event_types],
    }


# --- Application Lifecycle ---


@app.on_event("startup")
async def startup_event():
    """Application startup logic."""
    logger.info("Lintflow application starting up...")
    config.validate()

    await task_queue.start_workers(num_workers=config.task_workers)
    dispatcher.register_handler(PushEventHandler())

    logger.info("Event handlers registered and background workers started.")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown logic."""
    logger.info("Lintflow application shutting down...")
    await task_queue.stop_workers()
    logger.info("Background workers stopped.")


# --- Health Check Endpoints ---


@app.get("/health/tasks", tags=["Health Check"])
async def health_tasks():
    """Check the status of background tasks."""
    counts = {status.value: 0 for status in TaskStatus}
    for task in task_queue.tasks.values():
        counts[task.status.value] += 1

    return {
        "task_queue_status": "running" if task_queue.running else "stopped",
        "workers": len(task_queue.workers),
        "tasks": {**counts, "total": len(task_queue.tasks)},
    }
