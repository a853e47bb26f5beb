"""Assistant — AI chat completion for the dashboard helper.

Invariants:
    - Only the last HISTORY_TURNS turns of history reach the model
    - History is folded into a single user message: the model always sees a valid
      user-first conversation, whatever the client sent
    - Failures surface as ExternalServiceError (mapped by the resilient client)

Design Decisions:
    - Client injected (not constructed here): tests pass a fake with the same create_message()
"""

import logging

from app.config import Settings
from app.core.errors import ErrorContext
from app.infrastructure.anthropic_client import ResilientAnthropicClient
from app.schemas.assistant import ChatTurn

logger = logging.getLogger(__name__)

HISTORY_TURNS = 5

SYSTEM_PROMPT = (
    "You are the Gatherwise assistant. You help church staff with ministry "
    "administration: people, campuses, discipleship pathways, events and "
    "communication. Answer concisely and practically."
)


def build_prompt(prompt: str, history: list[ChatTurn]) -> str:
    recent = history[-HISTORY_TURNS:]
    if not recent:
        return prompt
    context = "\n".join(
        f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.content}"
        for turn in recent
    )
    return f"Previous conversation:\n{context}\n\nUser: {prompt}\n\nAssistant:"


def extract_text(response) -> str:
    return "".join(
        block.text for block in response.content
        if getattr(block, "type", None) == "text"
    )


async def chat(
    client: ResilientAnthropicClient,
    settings: Settings,
    prompt: str,
    history: list[ChatTurn],
    user_id: str | None = None,
) -> str:
    response = await client.create_message(
        model=settings.assistant_model,
        max_tokens=settings.assistant_max_tokens,
        system=SYSTEM_PROMPT,
        messages=[{"role": "user", "content": build_prompt(prompt, history)}],
        context=ErrorContext(user_id=user_id),
    )
    return extract_text(response)
