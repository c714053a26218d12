"""Main FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reprover_api.api.insight_routes import router as insight_router
from reprover_api.api.log_routes import router as log_router
from reprover_api.api.parse_routes import router as parse_router
from reprover_api.api.saved_workout_routes import router as saved_workout_router
from reprover_api.config import settings
from reprover_api.services.workout_store import StoreError

logger = logging.getLogger(__name__)

app = FastAPI(title="Reprover API")

# Configure CORS to allow requests from the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error responses: every failure body is {"error": ..., "details"?: ...}
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # ctx can hold the raw exception object raised by a validator
    details = [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request data",
            "details": jsonable_encoder(details),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(f"Document store error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Document store unavailable"})


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "environment": settings.ENVIRONMENT}


app.include_router(parse_router)
app.include_router(log_router)
app.include_router(saved_workout_router)
app.include_router(insight_router)
