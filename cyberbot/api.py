from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import time
import uuid

from cyberbot import __version__
from cyberbot.utils.config import config
from cyberbot.utils.logger import bind_request_context, logger
from cyberbot.assistant import api as chat_api
from cyberbot.pagespeed import api as performance_api
from cyberbot.sonarcloud import api as code_quality_api


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Cyber Bot API {__version__} in {config.ENV_MODE.value} mode")
    yield
    logger.info("Shutting down Cyber Bot API")


app = FastAPI(title="Cyber Bot", version=__version__, lifespan=lifespan)


@app.middleware("http")
async def log_requests_middleware(request: Request, call_next):
    bind_request_context(
        request_id=str(uuid.uuid4()),
        method=request.method,
        path=request.url.path,
    )

    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"
    logger.info(f"Request started: {request.method} {request.url.path} from {client_ip}")

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.debug(f"Request completed: {request.method} {request.url.path} | Status: {response.status_code} | Time: {process_time:.2f}s")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"Request failed: {request.method} {request.url.path} | Error: {str(e)} | Time: {process_time:.2f}s")
        raise


# Error bodies for requests whose JSON could not be read, keyed by route.
VALIDATION_ERROR_BODIES = {
    "/api/code-quality/validate": {"valid": False},
    "/api/performance/analyze": {"success": False},
}


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request body for {request.url.path}", errors=str(exc.errors()))
    body = dict(VALIDATION_ERROR_BODIES.get(request.url.path, {}))
    body["error"] = "Invalid request body"
    return JSONResponse(body, status_code=400)


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(chat_api.router, prefix="/api")

app.include_router(performance_api.router, prefix="/api")

app.include_router(code_quality_api.router, prefix="/api")


@app.get("/api/health")
async def health_check():
    """Health check endpoint to verify API is working."""
    logger.debug("Health check endpoint called")
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }


def main():
    import uvicorn

    logger.info("Starting server on 0.0.0.0:8000")
    uvicorn.run(
        "cyberbot.api:app",
        host="0.0.0.0",
        port=8000,
        loop="asyncio",
    )


if __name__ == "__main__":
    main()
