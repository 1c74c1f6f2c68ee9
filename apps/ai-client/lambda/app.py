"""AI invocation backend using FastAPI + Mangum for AWS Lambda."""

import logging
from functools import lru_cache

from fastapi import APIRouter, FastAPI, HTTPException
from mangum import Mangum

from ai_client.config import EnvConfig, load_env_config
from ai_client.errors import ClassifiedError, ErrorKind
from ai_client.infra.runtime import (
    ensure_langsmith_configured,
    flush_langsmith_traces,
    with_ssm_credentials,
)
from ai_client.schemas import InvocationOptions, InvokeRequest, InvokeResponse
from ai_client.services.invoker import UnifiedInvoker

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

app = FastAPI()
router = APIRouter(prefix="/api")

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.CONFIG_MISSING: 500,
    ErrorKind.UNSUPPORTED_PROVIDER: 500,
    ErrorKind.RATE_LIMITED: 429,
}
DEFAULT_ERROR_STATUS_CODE = 502


def load_runtime_config() -> EnvConfig:
    config = with_ssm_credentials(load_env_config())
    ensure_langsmith_configured(config)
    return config


@lru_cache(maxsize=1)
def get_invoker() -> UnifiedInvoker:
    return UnifiedInvoker(config_loader=load_runtime_config)


@router.post("/invoke", response_model=InvokeResponse)
def invoke(request: InvokeRequest) -> InvokeResponse:
    """Generate a completion for the prompt with the selected provider."""
    options = InvocationOptions(
        provider=request.provider,
        model=request.model,
        max_tokens=request.max_tokens,
        temperature=request.temperature,
    )
    try:
        text = get_invoker().invoke(request.prompt, options)
        return InvokeResponse(text=text)
    except ClassifiedError as e:
        logger.warning(
            "AI invocation failed",
            extra={"error_kind": e.kind.value, "provider": e.provider},
        )
        raise HTTPException(
            status_code=ERROR_STATUS_CODES.get(e.kind, DEFAULT_ERROR_STATUS_CODE),
            detail={"kind": e.kind.value, "message": e.message},
        ) from e
    finally:
        flush_langsmith_traces()


@router.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(router)


handler = Mangum(app)
