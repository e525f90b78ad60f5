"""Base types for the tool-calling framework."""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@dataclass
class ToolResult:
    """Result of a tool execution.

    Every tool returns one of these, including on failure. The
    orchestrator serializes it into a tool-result message for the model.
    """

    data: dict[str, Any] | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def result(self) -> dict[str, Any]:
        """The JSON value the model sees."""
        if self.error is not None:
            return {"error": self.error}
        return self.data or {}

    def to_content(self) -> str:
        """Serialize for the tool-result message content."""
        return json.dumps(self.result)


class ToolParams(BaseModel):
    """Base class for tool parameter models.

    Subclass with Field() definitions. Arguments use camelCase names on
    the wire (``categoryId``); handlers receive snake_case keyword
    arguments. Numbers must be finite. The JSON schema is generated via
    model_json_schema().
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )
