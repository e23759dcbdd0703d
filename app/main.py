from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from app.schemas import ErrorResponse, GenerateRequest, GenerateResponse, HealthResponse
from assistant.agent import build_backend
from assistant.core.conversation import normalize
from assistant.core.errors import AssistantError, ConfigurationError
from assistant.core.prompt import build_pet_prompt
from assistant.dispatcher import Dispatcher, GenerationBackend
from config.settings import Settings, get_settings


logging.basicConfig(
    level=get_settings().log_level,
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("fetchr")

router = APIRouter(prefix="/api")


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


@router.post(
    "/generate-content",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_content(req: GenerateRequest, dispatcher: Dispatcher = Depends(get_dispatcher)):
    logger.info("--- NEW PET ASSISTANT REQUEST ---")
    logger.info("Received %s messages from frontend", len(req.messages or []))
    logger.info(
        "Pet data: %s | Sensor data: %s",
        f"{req.pet_data.name} ({req.pet_data.breed})" if req.pet_data else "No pet data",
        "Available" if req.sensor_data else "No sensor data",
    )

    try:
        instruction = build_pet_prompt(req.pet_data, req.sensor_data)
        contents = normalize(instruction, req.messages)
        logger.info("Mapped %s messages for Gemini (including system prompt)", len(contents))

        text = await dispatcher.dispatch(contents)
    except AssistantError as e:
        logger.warning("Request rejected (%s): %s %s", e.status_code, e.message, e.details or "")
        return JSONResponse(status_code=e.status_code, content=e.to_payload())
    except Exception as e:
        logger.exception("Pet assistant processing failed: %s", e)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error: Pet Assistant API communication failed.",
                "details": str(e),
            },
        )

    logger.info("Response preview: %s", text[:150])
    return GenerateResponse(content=text)


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": request.app.state.settings.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    ]
    logger.warning("Malformed request body: %s", problems)
    return JSONResponse(
        status_code=400,
        content={"error": "invalid request body", "details": "; ".join(problems)},
    )


def create_app(
    settings: Optional[Settings] = None,
    backend: Optional[GenerationBackend] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            generation_backend = backend or build_backend(settings)
        except ConfigurationError as e:
            logger.critical("FATAL ERROR: %s", e)
            raise
        app.state.dispatcher = Dispatcher(generation_backend, timeout=settings.request_timeout)
        logger.info("Gemini client initialized (model=%s)", settings.gemini_model)
        yield

    app = FastAPI(title=settings.service_name, version="1.0.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    @app.middleware("http")
    async def log_request_origin(request: Request, call_next):
        user_agent = request.headers.get("user-agent")
        logger.info(
            "Request from: %s | User-Agent: %s",
            request.headers.get("origin") or "No Origin header",
            user_agent[:50] if user_agent else "Unknown",
        )
        return await call_next(request)

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Fetchr Pet Assistant API running on http://%s:%s", settings.host, settings.port)
    logger.info("Endpoints: POST /api/generate-content, GET /api/health")
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
