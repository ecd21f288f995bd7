from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from onboarding.api.router import api_router, views_router
from onboarding.api.routes import base, health
from onboarding.core.config import settings
from onboarding.core.errors import OnboardingError, onboarding_error_handler, unhandled_error_handler
from onboarding.core.logging import configure_logging
from onboarding.services.directory import directory_service
from onboarding.services.function_client import function_client

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    await function_client.initialize(settings)
    await directory_service.initialize(settings)
    logger.info("Onboarding API %s started", settings.APP_VERSION)
    yield
    await directory_service.close()
    await function_client.close()


app = FastAPI(
    title="HR Onboarding API",
    description="Orientation tracking, role documents and acknowledgements over Azure Functions",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(OnboardingError, onboarding_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(health.router)
app.include_router(base.router)
app.include_router(api_router)
app.include_router(views_router)


@app.get("/")
async def root():
    return {"message": "HR Onboarding API"}
