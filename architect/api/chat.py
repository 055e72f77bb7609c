import logging

from fastapi import APIRouter

from architect.core.exceptions import ArchitectError, UpstreamError
from architect.core.metrics import chat_requests_total
from architect.schemas.chat import ChatRequest, ChatResponse
from architect.services.chat import complete_chat

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=ChatResponse,
    summary="Chat with Architect Prime",
    description="Forward the conversation, prefixed with the Architect Prime persona, "
    "to the configured completion model and return its reply.",
)
async def chat(request: ChatRequest):
    try:
        message = await complete_chat(request.messages)
    except ArchitectError:
        chat_requests_total.labels(status="error").inc()
        raise
    except Exception as e:
        logger.exception("Unexpected chat error")
        chat_requests_total.labels(status="error").inc()
        raise UpstreamError(str(e) or "An error occurred during the request.") from e

    chat_requests_total.labels(status="success").inc()
    return ChatResponse(message=message)
