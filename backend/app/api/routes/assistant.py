"""Assistant Routes — AI chat for signed-in users."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user
from app.config import get_settings
from app.infrastructure.anthropic_client import ResilientAnthropicClient
from app.models.user import User
from app.schemas.assistant import ChatRequest, ChatResponse
from app.services import assistant

router = APIRouter(prefix="/api/v1/ai", tags=["assistant"])

_anthropic_client: ResilientAnthropicClient | None = None


def get_anthropic_client() -> ResilientAnthropicClient:
    """Process-wide client: AsyncAnthropic pools connections across requests."""
    global _anthropic_client
    if _anthropic_client is None:
        _anthropic_client = ResilientAnthropicClient.from_settings(get_settings())
    return _anthropic_client


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    user: User = Depends(get_current_user),
    client: ResilientAnthropicClient = Depends(get_anthropic_client),
):
    output = await assistant.chat(
        client, get_settings(), body.prompt, body.history, user_id=str(user.id),
    )
    return ChatResponse(output=output)
