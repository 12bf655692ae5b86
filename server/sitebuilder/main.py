import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.chat import router as chat_router
from .api.health import router as health_router
from .core.errors import MissingCredentialError, RequestValidationFailed
from .utils import config

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
    "Access-Control-Allow-Headers": ", ".join(CORS_HEADERS),
}

# bad JSON bodies never reach the route, so the 400 message is picked by path
VALIDATION_MESSAGES = {
    "/api/chat": "Message is required",
    "/api/chat/send": "Chat ID and message are required",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not config.get_api_key():
        logger.critical("No %s found! Set it in the environment or .env", config.V0_API_KEY_ENV)
        raise MissingCredentialError(f"{config.V0_API_KEY_ENV} is required")
    logger.info("SiteBuilder relay ready on port %s", config.PORT)
    yield


app = FastAPI(title="SiteBuilder Relay", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=CORS_METHODS,
    allow_headers=CORS_HEADERS,
)


@app.middleware("http")
async def preflight(request: Request, call_next):
    # every OPTIONS request is a successful, empty preflight regardless of path
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=PREFLIGHT_HEADERS)
    return await call_next(request)


app.include_router(health_router, prefix="/api")
app.include_router(chat_router, prefix="/api")


@app.exception_handler(RequestValidationFailed)
async def request_validation_failed(request: Request, exc: RequestValidationFailed):
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def unparseable_body(request: Request, exc: RequestValidationError):
    msg = VALIDATION_MESSAGES.get(request.url.path, "Invalid request body")
    return JSONResponse(status_code=400, content={"error": msg})


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    # unknown paths and known paths with the wrong method both answer 404
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "availableEndpoints": config.AVAILABLE_ENDPOINTS},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def server_error(request: Request, exc: Exception):
    logger.exception("Server error on %s %s", request.method, request.url.path)
    # runs outside CORSMiddleware, so the header is set here
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error"},
        headers={"Access-Control-Allow-Origin": PREFLIGHT_HEADERS["Access-Control-Allow-Origin"]},
    )


def run():
    logger.info("Health check: http://localhost:%s/api/health", config.PORT)
    logger.info("Chat API: POST http://localhost:%s/api/chat", config.PORT)
    uvicorn.run("sitebuilder.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
