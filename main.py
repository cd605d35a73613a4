import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.database import AUTO_CREATE_TABLES, init_db
from app.errors import ApiError, store_error_message
from app.logging_setup import configure_logging
from app.routers import auth, readings, thresholds

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if AUTO_CREATE_TABLES:
        init_db()
    else:
        logger.info("Table creation disabled via AUTO_CREATE_TABLES")
    yield


app = FastAPI(title="DHT Monitor API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# Non-browser clients (firmware, scripts) send no Origin but still expect the header
@app.middleware("http")
async def always_allow_origin(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("Access-Control-Allow-Origin", "*")
    return response


# Failures are reported in the body; the HTTP status stays 200 for every handled error
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse({"status": "error", "message": exc.message})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"status": "error", "message": store_error_message(exc)})


# Routes
app.include_router(readings.router)
app.include_router(auth.router)
app.include_router(thresholds.router)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "3003")),
        reload=False,
    )
