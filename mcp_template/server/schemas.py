"""Argument schemas for the example tools.

Each tool validates its own arguments against one of these Pydantic models
inside its handler; validation is not centralized in the protocol adapter.

Example:
    from mcp_template.server.schemas import validate_tool_input

    args = validate_tool_input("echo", {"message": "hi"})   # EchoArguments
    validate_tool_input("echo", {})                          # raises ToolInputError
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from mcp_template.framework.errors import ToolInputError


class GetTimeArguments(BaseModel):
    """Arguments for get_time.

    An omitted or empty timezone means UTC.
    """

    timezone: str | None = Field(
        default=None,
        description="Timezone (e.g., 'America/New_York', 'UTC')",
        examples=["America/New_York", "UTC"],
    )

    model_config = ConfigDict(str_strip_whitespace=True)


class EchoArguments(BaseModel):
    """Arguments for echo."""

    message: str = Field(..., description="Message to echo back", examples=["hello"])


TOOL_SCHEMAS: dict[str, type[BaseModel]] = {
    "get_time": GetTimeArguments,
    "echo": EchoArguments,
}


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def validate_tool_input(tool_name: str, arguments: dict[str, Any] | None) -> Any:
    """Validate tool arguments against the tool's schema.

    Args:
        tool_name: Name of the tool
        arguments: Raw arguments from the call-tool request

    Returns:
        Validated Pydantic model instance

    Raises:
        ValueError: If no schema is registered for the tool
        ToolInputError: If the arguments do not match the schema
    """
    schema_class = TOOL_SCHEMAS.get(tool_name)
    if schema_class is None:
        msg = f"No schema defined for tool '{tool_name}'"
        raise ValueError(msg)

    try:
        return schema_class.model_validate(arguments or {})
    except PydanticValidationError as e:
        path = [str(p) for p in e.errors()[0]["loc"]] if e.errors() else None
        msg = f"Invalid arguments: {_format_errors(e)}"
        raise ToolInputError(msg, tool_name=tool_name, path=path) from e


__all__ = [
    "TOOL_SCHEMAS",
    "EchoArguments",
    "GetTimeArguments",
    "validate_tool_input",
]
