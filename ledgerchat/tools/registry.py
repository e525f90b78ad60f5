"""Tool registry: the closed catalog of operations the model may request."""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ledgerchat.tools.base import ToolParams, ToolResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from ledgerchat.models import ContextData

logger = logging.getLogger(__name__)


@dataclass
class ToolDef:
    """Internal representation of a registered tool."""

    name: str
    description: str
    handler: Callable[..., ToolResult]
    params_model: type[ToolParams] | None = None
    mutating: bool = False


@dataclass(frozen=True)
class ToolSpec:
    """Vendor-neutral tool declaration. Providers serialize this."""

    name: str
    description: str
    parameters: dict[str, Any]


class ToolRegistry:
    """Central registry for expense tools.

    Handlers are plain functions taking the request's ``ContextData`` as
    first argument plus the validated parameters as keywords::

        @registry.tool(
            name="my_tool",
            description="Does a thing",
            params_model=MyParams,
        )
        def my_tool(context: ContextData, limit: int) -> ToolResult:
            return ToolResult(data={"ok": True})
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDef] = {}

    def tool(
        self,
        *,
        name: str,
        description: str,
        params_model: type[ToolParams] | None = None,
        mutating: bool = False,
    ) -> Callable:
        """Decorator to register a function as a tool."""

        def decorator(fn: Callable[..., ToolResult]) -> Callable:
            if inspect.iscoroutinefunction(fn):
                msg = f"Tool handler '{name}' must be a plain function"
                raise TypeError(msg)

            self._tools[name] = ToolDef(
                name=name,
                description=description,
                handler=fn,
                params_model=params_model,
                mutating=mutating,
            )
            return fn

        return decorator

    def get(self, name: str) -> ToolDef | None:
        """Look up a tool by name."""
        return self._tools.get(name)

    @property
    def tool_names(self) -> list[str]:
        """All registered tool names."""
        return list(self._tools.keys())

    def get_specs(self) -> list[ToolSpec]:
        """Vendor-neutral declarations for all registered tools."""
        return [self._tool_spec(t) for t in self._tools.values()]

    def execute(
        self,
        name: str,
        arguments: dict[str, Any],
        context: ContextData,
    ) -> ToolResult:
        """Execute a tool by name against a context snapshot.

        Validates arguments against the params_model if one is defined.
        Never raises: unknown tools, invalid arguments and handler
        failures all come back as error results.
        """
        tool_def = self._tools.get(name)
        if tool_def is None:
            logger.warning("Unknown tool requested: %s", name)
            return ToolResult(error=f"Unknown tool: {name}")

        logger.info("Tool '%s' called with %s", name, arguments)
        t0 = time.monotonic()

        try:
            if tool_def.params_model is not None:
                params = tool_def.params_model.model_validate(arguments)
                kwargs = params.model_dump()
            else:
                kwargs = {}

            result = tool_def.handler(context, **kwargs)
        except ValidationError as exc:
            logger.warning("Tool '%s' rejected arguments: %s", name, exc)
            return ToolResult(error=_describe_validation_error(name, exc))
        except Exception:
            elapsed = time.monotonic() - t0
            logger.exception("Tool '%s' failed in %.3fs", name, elapsed)
            return ToolResult(error=f"Tool '{name}' failed. Check logs for details.")

        elapsed = time.monotonic() - t0
        if result.success:
            logger.info("Tool '%s' succeeded in %.3fs", name, elapsed)
        else:
            logger.warning("Tool '%s' returned error in %.3fs: %s", name, elapsed, result.error)
        return result

    @staticmethod
    def _tool_spec(tool_def: ToolDef) -> ToolSpec:
        if tool_def.params_model is not None:
            parameters = tool_def.params_model.model_json_schema()
        else:
            parameters = {"type": "object", "properties": {}}

        return ToolSpec(
            name=tool_def.name,
            description=tool_def.description,
            parameters=parameters,
        )


def _describe_validation_error(name: str, exc: ValidationError) -> str:
    """One-line summary of a pydantic ValidationError for the model."""
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "arguments"
        problems.append(f"{field}: {err['msg']}")
    return f"Invalid arguments for '{name}': " + "; ".join(problems)


# Global registry. expense_tools registers the six tools on import.
registry = ToolRegistry()
