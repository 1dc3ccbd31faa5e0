import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import NoteNotFoundError, NoteValidationError, PersistenceError
from .routers import notes as notes_router
from .settings import Settings, get_settings
from .store import NotesStore
from .utils import error_body

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health"},
    {"name": "notes", "description": "Notes management"},
]


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NoteValidationError)
    async def note_validation_handler(request: Request, exc: NoteValidationError) -> JSONResponse:
        """Store rejected the input: 400 with every violation."""
        return JSONResponse(status_code=400, content=error_body(str(exc), exc.messages))

    @app.exception_handler(NoteNotFoundError)
    async def note_not_found_handler(request: Request, exc: NoteNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content=error_body("Note not found"))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        The body could not be parsed at all (invalid JSON, not an object).

        Response format:
            {"error": "Request validation failed", "details": [... pydantic/fastapi error details ...]}
        """
        return JSONResponse(
            status_code=422,
            content=error_body("Request validation failed", jsonable_encoder(exc.errors())),
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("Persistence failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=error_body("Internal Server Error"))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=error_body("Internal Server Error"))


# PUBLIC_INTERFACE
def create_app(store: Optional[NotesStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Store to serve. When omitted, one is opened on settings.data_file at startup.
        settings: Explicit settings; read from the environment when omitted.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "store", None) is None:
            app.state.store = NotesStore(settings.data_file)
        yield

    app = FastAPI(
        title="Simple Notes API",
        description="REST API for managing notes (CRUD) with simple file persistence.",
        version="1.0.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.settings = settings

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health endpoint", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {
            "status": "ok",
            "message": "Service is healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        }

    app.include_router(notes_router.router)
    return app


app = create_app()
