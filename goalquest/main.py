import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

# Load env from goalquest/.env before settings are read
package_dir = os.path.dirname(os.path.abspath(__file__))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(package_dir, ".env"))

from goalquest.api import achievements, gamification, health, levels  # noqa: E402
from goalquest.core.config import settings, validate_config  # noqa: E402
from goalquest.core.errors import (  # noqa: E402
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from goalquest.core.logging import configure_logging  # noqa: E402
from goalquest.core.middleware.request_id import RequestIdMiddleware  # noqa: E402

configure_logging(settings.ENV)
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("goalquest")
    logger.info("Starting GoalQuest gamification API...")
    try:
        yield
    finally:
        logging.getLogger("goalquest").info("Stopping GoalQuest gamification API...")


app = FastAPI(title="GoalQuest - Gamification", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(health.router)
app.include_router(gamification.router)
app.include_router(achievements.router)
app.include_router(levels.router)
