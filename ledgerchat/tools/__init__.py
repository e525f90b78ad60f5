"""Tool framework. Importing this package registers the expense tools."""

# Import tool modules so their @registry.tool() decorators execute.
from ledgerchat.tools import expense_tools  # noqa: F401
from ledgerchat.tools.registry import registry

__all__ = ["registry"]
