from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, StreamingResponse

from .actions import list_actions_for_api
from .config import Settings, get_settings
from .errors import ValidationError
from .generation import build_stream_client
from .pipeline import AnalysisPipeline
from .schemas import ActionListResponse, HealthResponse
from .transport import UI_MESSAGE_STREAM_HEADERS, encode_ui_stream

router = APIRouter()

logger = logging.getLogger(__name__)


def get_pipeline(settings: Settings = Depends(get_settings)) -> AnalysisPipeline:
    return AnalysisPipeline(build_stream_client(settings))


@router.get("/health", response_model=HealthResponse)
def healthcheck() -> HealthResponse:
    return HealthResponse()


@router.get("/api/actions", response_model=ActionListResponse, response_model_by_alias=True)
def list_actions() -> dict:
    return {"actions": list_actions_for_api()}


@router.post("/api/chat")
async def chat(request: Request, pipeline: AnalysisPipeline = Depends(get_pipeline)):
    """Validate the request and stream the model's answer as a UI message stream.

    Validation failures return 400 with a short reason before any model call.
    Failures after streaming has begun arrive as an ``error`` event.
    """
    try:
        payload = await request.json()
    except ValueError:
        return PlainTextResponse("Invalid JSON payload", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        prepared = pipeline.prepare(payload)
    except ValidationError as exc:
        logger.info("Rejected analysis request: %s", exc.reason)
        return PlainTextResponse(exc.reason, status_code=status.HTTP_400_BAD_REQUEST)
    except Exception:
        logger.exception("Error in chat route")
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return StreamingResponse(
        encode_ui_stream(pipeline.stream(prepared), prepared.message_id),
        media_type="text/event-stream",
        headers=UI_MESSAGE_STREAM_HEADERS,
    )
