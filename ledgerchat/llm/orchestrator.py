"""The chat loop: completion calls alternating with local tool execution."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ledgerchat.config import settings as default_settings
from ledgerchat.errors import CompletionTimeoutError, InvalidRequestError
from ledgerchat.llm.completion import Message, ToolCallRequest
from ledgerchat.llm.prompt import build_system_prompt
from ledgerchat.models import ChatResponse, CreatedExpense
from ledgerchat.tools import registry as default_registry
from ledgerchat.tools.base import ToolResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledgerchat.config import Settings
    from ledgerchat.llm.completion import Completion, CompletionProvider, ToolCall
    from ledgerchat.models import ChatMessage, ContextData
    from ledgerchat.tools.registry import ToolRegistry, ToolSpec

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """Outcome of one user turn."""

    response: str
    created_expense: CreatedExpense | None = None

    def to_response(self) -> ChatResponse:
        return ChatResponse(response=self.response, created_expense=self.created_expense)


class ChatOrchestrator:
    """Drives one user message through the completion endpoint and tools.

    Stateless between calls: everything a turn needs arrives as arguments.
    The provider is injected so tests and alternate vendors can swap it.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        *,
        registry: ToolRegistry | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._provider = provider
        self._registry = registry or default_registry
        self._settings = settings or default_settings

    def validate_message(self, message: object) -> str:
        """Reject empty or oversized messages before any model call."""
        limit = self._settings.max_message_length
        if not isinstance(message, str) or not message.strip() or len(message) > limit:
            raise InvalidRequestError(
                "invalid message",
                user_message=f"Invalid or too long message (max {limit} characters)",
            )
        return message

    def build_messages(
        self,
        message: str,
        context: ContextData,
        history: Sequence[ChatMessage],
    ) -> list[Message]:
        """System prompt, the trimmed history window, then the new message.

        Loading placeholders and blank turns are dropped before windowing.
        """
        window = self._settings.history_window
        settled = [m for m in history if not m.is_loading and m.content.strip()]
        recent = settled[-window:] if window > 0 else []

        messages = [
            Message.system(
                build_system_prompt(context, recent_limit=self._settings.recent_expenses_limit)
            )
        ]
        messages.extend(Message(role=m.role, content=m.content) for m in recent)
        messages.append(Message.user(message))
        return messages

    async def run(
        self,
        message: str,
        context: ContextData,
        history: Sequence[ChatMessage] = (),
    ) -> ChatResult:
        """Answer one user message.

        Makes at most ``max_tool_rounds + 1`` completion calls. Tool
        failures are fed back to the model; only completion failures
        (``CompletionError``) escape.

        When one turn contains several successful create_expense calls,
        only the last proposal is returned.
        """
        message = self.validate_message(message)
        messages = self.build_messages(message, context, history)
        tool_specs = self._registry.get_specs()
        max_rounds = self._settings.max_tool_rounds

        created_expense: CreatedExpense | None = None
        completion = await self._complete(messages, tool_specs)

        rounds = 0
        while isinstance(completion, ToolCallRequest):
            if rounds >= max_rounds:
                logger.warning("Hit max tool rounds (%d)", max_rounds)
                break
            rounds += 1

            logger.info(
                "Round %d: %d tool call(s): %s",
                rounds,
                len(completion.calls),
                ", ".join(c.name for c in completion.calls),
            )

            messages.append(Message.assistant(completion.text or None, completion.calls))

            for call in completion.calls:
                result = self._run_tool(call, context)
                proposal = self._extract_proposal(call, result)
                if proposal is not None:
                    created_expense = proposal
                messages.append(Message.tool_result(call, result))

            completion = await self._complete(messages, tool_specs)

        return ChatResult(response=completion.text, created_expense=created_expense)

    async def _complete(self, messages: list[Message], tool_specs: list[ToolSpec]) -> Completion:
        timeout = self._settings.request_timeout
        try:
            return await asyncio.wait_for(
                self._provider.complete(messages, tool_specs), timeout=timeout
            )
        except TimeoutError as exc:
            msg = f"Completion call exceeded {timeout:.0f}s"
            raise CompletionTimeoutError(msg) from exc

    def _run_tool(self, call: ToolCall, context: ContextData) -> ToolResult:
        try:
            arguments = call.parse_arguments()
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            logger.warning("Tool '%s' sent unparseable arguments: %r", call.name, call.raw_arguments)
            return ToolResult(error=f"Invalid arguments for '{call.name}': {exc}")

        return self._registry.execute(call.name, arguments, context)

    def _extract_proposal(self, call: ToolCall, result: ToolResult) -> CreatedExpense | None:
        tool_def = self._registry.get(call.name)
        if tool_def is None or not tool_def.mutating or result.is_error:
            return None

        payload = result.result
        if not payload.get("success") or "expense" not in payload:
            return None
        return CreatedExpense.model_validate(payload["expense"])
