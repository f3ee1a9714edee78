# image_queue/main.py
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from image_queue.core.config import settings
from image_queue.core.errors import (
    ConfigurationError,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from image_queue.core.logging import logger

# Configure stdlib logging for the modules and libraries that use it
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

missing = settings.missing_integrations()
for integration in missing:
    logger.warning(f"{integration} is not configured; endpoints that need it will return 500")
if missing and settings.REQUIRE_INTEGRATIONS:
    raise ConfigurationError(f"Missing integration configuration: {', '.join(missing)}")

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json"
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Set up CORS
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    logger.info(f"Request: {request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.2f}s")
    return response


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# Create tables and seed the admin account
from image_queue.db.base import Base  # noqa: E402
from image_queue.db.init_db import init_db  # noqa: E402
from image_queue.db.session import engine, session_scope  # noqa: E402

Base.metadata.create_all(bind=engine)
logger.info("Database tables created")

with session_scope() as db:
    init_db(db)

from image_queue.api.api import api_router  # noqa: E402

app.include_router(api_router, prefix=settings.API_PREFIX)

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting {settings.PROJECT_NAME} in development mode")
    uvicorn.run("image_queue.main:app", host=settings.HOST, port=settings.PORT, reload=settings.RELOAD)
