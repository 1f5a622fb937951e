import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from persona_rag.api.routes import router as api_router
from persona_rag.config import public_settings, setup_logging, validate_settings
from persona_rag.errors import BackendUnavailable, EmptyInput, PersonaRagError

logger = setup_logging()


def create_app(validate: bool = True) -> FastAPI:
    if validate:
        validate_settings()

    app = FastAPI(title="Persona RAG Bot")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.exception_handler(EmptyInput)
    async def empty_input_handler(request: Request, exc: EmptyInput):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(BackendUnavailable)
    async def backend_unavailable_handler(request: Request, exc: BackendUnavailable):
        logger.error("Backend unavailable", extra={"path": request.url.path, "backend": exc.backend})
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(PersonaRagError)
    async def pipeline_error_handler(request: Request, exc: PersonaRagError):
        logger.error("Pipeline error", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(api_router)
    logger.info("Application starting")
    logger.info("Loaded settings: %s", public_settings())
    return app


__all__ = ["create_app"]
