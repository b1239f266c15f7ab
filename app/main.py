from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from app.api.v1.router import api_router
from app.core.config import settings
from app.core.errors import CoachError
from app.core.logging import configure_logging
from app.services.voiceflow_gateway import get_voiceflow_gateway

configure_logging(settings.LOG_LEVEL)

CORS_ALLOW_METHODS = ['GET', 'POST', 'OPTIONS']
CORS_ALLOW_HEADERS = ['authorization', 'x-client-info', 'apikey', 'content-type']


@asynccontextmanager
async def lifespan(_: FastAPI):
    if not get_voiceflow_gateway().is_configured:
        logger.warning('coach.proxy.voiceflow_not_configured')
    yield

app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG, lifespan=lifespan)

allow_origins = settings.CORS_ORIGINS
allow_credentials = '*' not in allow_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.exception_handler(CoachError)
async def coach_error_handler(_: Request, exc: CoachError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


app.include_router(api_router)
