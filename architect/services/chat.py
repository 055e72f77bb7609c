import logging

from architect.config import settings
from architect.core.exceptions import ConfigurationError, UpstreamError
from architect.schemas.chat import ChatMessage

logger = logging.getLogger(__name__)

ARCHITECT_PERSONA = (
    "You are Architect Prime, an AGI-level software engineer and architecture engine. "
    "Your knowledge of dependencies, libraries, and frameworks is absolute and bleeding-edge "
    "(React 19, Next.js 15 App Router, Motion v12, Tailwind v4, WebAssembly, WebGL, Edge computing). "
    "Your problem-solving exhibits non-human creativity. You do not provide standard boilerplate; "
    "you engineer hyper-optimized, unconventional, and elegant architectural paradigms. "
    "Think in terms of atomic modularity, hardware-accelerated rendering, and zero-latency state management. "
    "Respond with cold, precise, highly technical brilliance. Omit pleasantries. "
    "Deliver raw architectural synthesis."
)


def build_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    """Prepend the system persona to the conversation."""
    return [{"role": "system", "content": ARCHITECT_PERSONA}] + [
        m.model_dump() for m in messages
    ]


async def complete_chat(messages: list[ChatMessage]) -> ChatMessage:
    """Send the conversation to the completion provider via LiteLLM."""
    import litellm

    if not settings.OPENAI_API_KEY:
        raise ConfigurationError("OPENAI_API_KEY is not set.")

    try:
        response = await litellm.acompletion(
            model=settings.CHAT_MODEL,
            messages=build_messages(messages),
            api_key=settings.OPENAI_API_KEY,
            temperature=settings.CHAT_TEMPERATURE,
            max_tokens=settings.CHAT_MAX_TOKENS,
            timeout=settings.CHAT_TIMEOUT,
        )
    except Exception as e:
        logger.error(f"Chat completion failed: {e}")
        raise UpstreamError(str(e) or "An error occurred during the request.") from e

    reply = response.choices[0].message
    return ChatMessage(role=reply.role or "assistant", content=reply.content or "")
