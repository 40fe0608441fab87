"""Entry point for the Controller (namespace) service."""

import uvicorn
import time
import uuid
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from controller.config import CONTROLLER_HOST, CONTROLLER_PORT
from controller.routes import fsck_router, namespace_router
from controller.exceptions import (
    NamespaceException,
    InvalidPathError,
    EntryNotFoundError,
    EntryExistsError,
    EntryNotDirectoryError,
    EntryIsDirectoryError,
    UnknownBlockError,
    UnknownNodeError
)
from controller.schemas import ErrorResponse
from fsck.exceptions import InvalidArgumentError

logger = setup_logging('controller')
setup_logging('fsck')

app = FastAPI(
    title="RedCloud Namespace Service",
    description="Namespace metadata service with block-health checking (fsck)",
    version="1.0.0"
)

app.include_router(namespace_router)
app.include_router(fsck_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


def _error_response(request: Request, exc: Exception, status_code: int, code: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=code).model_dump()
    )


@app.exception_handler(InvalidPathError)
async def invalid_path_handler(request: Request, exc: InvalidPathError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_PATH")


@app.exception_handler(EntryNotFoundError)
async def entry_not_found_handler(request: Request, exc: EntryNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "ENTRY_NOT_FOUND")


@app.exception_handler(EntryExistsError)
async def entry_exists_handler(request: Request, exc: EntryExistsError):
    return _error_response(request, exc, status.HTTP_409_CONFLICT, "ENTRY_EXISTS")


@app.exception_handler(EntryNotDirectoryError)
async def not_directory_handler(request: Request, exc: EntryNotDirectoryError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "NOT_A_DIRECTORY")


@app.exception_handler(EntryIsDirectoryError)
async def is_directory_handler(request: Request, exc: EntryIsDirectoryError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "IS_A_DIRECTORY")


@app.exception_handler(UnknownBlockError)
async def unknown_block_handler(request: Request, exc: UnknownBlockError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "UNKNOWN_BLOCK")


@app.exception_handler(UnknownNodeError)
async def unknown_node_handler(request: Request, exc: UnknownNodeError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "UNKNOWN_NODE")


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_ARGUMENT")


@app.exception_handler(NamespaceException)
async def namespace_exception_handler(request: Request, exc: NamespaceException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Namespace exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(detail=str(exc), code="INTERNAL_ERROR").model_dump()
    )


@app.get("/")
async def root():
    """
    Health check endpoint.
    """
    return {"status": "running", "service": "namespace"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    logger.info(f"Starting namespace service on {CONTROLLER_HOST}:{CONTROLLER_PORT}")
    uvicorn.run(
        "controller.main:app",
        host=CONTROLLER_HOST,
        port=CONTROLLER_PORT
    )


if __name__ == "__main__":
    main()
