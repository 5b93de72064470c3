import json
from typing import Any, Dict, Optional

from anyio import to_thread
from fastapi import APIRouter, Header, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from ..exceptions import GenerationFailed, InputError
from ..logging import jlog
from ..schemas import ErrorResponse, GenerateRequest, GenerateResponse
from ..service import generate_code

router = APIRouter()

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

async def read_payload(request: Request) -> GenerateRequest:
    """
    Decode JSON or form bodies into a GenerateRequest.

    Game clients post `application/x-www-form-urlencoded` (GMod http.Post);
    everything else is treated as JSON, falling back to an empty body.
    """
    content_type = request.headers.get("content-type", "").lower()
    data: Dict[str, Any] = {}

    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        data["prompt"] = form.get("prompt")
        models = form.getlist("models") or form.getlist("models[]")
        if models:
            data["models"] = models[0] if len(models) == 1 else list(models)
    else:
        raw = await request.body()
        if raw:
            try:
                parsed = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                parsed = None
            if isinstance(parsed, dict):
                data = parsed

    try:
        return GenerateRequest.model_validate(data)
    except ValidationError as e:
        raise InputError(f"Invalid request body: {e.errors()[0].get('msg', 'validation error')}") from e

async def _run(request: Request, correlation_id: Optional[str]) -> GenerateResponse:
    payload = await read_payload(request)
    # Orchestration blocks on provider round-trips; keep it off the event loop
    return await to_thread.run_sync(generate_code, payload, correlation_id)

@router.post(
    "/generate",
    response_class=PlainTextResponse,
    summary="Generate code and return it as plain text (Lua-friendly)",
    status_code=status.HTTP_200_OK,
)
async def generate_plain(
    request: Request,
    x_correlation_id: Optional[str] = Header(default=None),
) -> PlainTextResponse:
    # Errors come back as Lua comments so CompileString on the client stays harmless
    try:
        result = await _run(request, x_correlation_id)
        return PlainTextResponse(result.clean_code)
    except InputError as e:
        jlog(event="codegen_failed", retryable=False, error=str(e), correlation_id=x_correlation_id)
        return PlainTextResponse(f"-- [AI ERROR] {e}", status_code=status.HTTP_400_BAD_REQUEST)
    except GenerationFailed as e:
        jlog(
            event="codegen_failed",
            retryable=e.cause.transient,
            error=str(e),
            model_name=e.model,
            correlation_id=x_correlation_id,
            severity="ERROR",
        )
        return PlainTextResponse(f"-- [AI SERVER ERROR] {e}", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    except Exception as e:
        jlog(event="codegen_failed", error=str(e), correlation_id=x_correlation_id, severity="ERROR")
        return PlainTextResponse(f"-- [AI SERVER ERROR] {e}", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

@router.post(
    "/generator",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Generate code and return it with the model that produced it",
    status_code=status.HTTP_200_OK,
)
async def generate_json(
    request: Request,
    x_correlation_id: Optional[str] = Header(default=None),
):
    try:
        return await _run(request, x_correlation_id)
    except InputError as e:
        jlog(event="codegen_failed", retryable=False, error=str(e), correlation_id=x_correlation_id)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=str(e)).model_dump(),
        )
    except GenerationFailed as e:
        jlog(
            event="codegen_failed",
            retryable=e.cause.transient,
            error=str(e),
            model_name=e.model,
            correlation_id=x_correlation_id,
            severity="ERROR",
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e), model=e.model).model_dump(),
        )
    except Exception as e:
        jlog(event="codegen_failed", error=str(e), correlation_id=x_correlation_id, severity="ERROR")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e) or "Internal Server Error").model_dump(),
        )
