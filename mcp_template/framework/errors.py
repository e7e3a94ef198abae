"""
Error taxonomy for standardized error handling across the MCP server.

Tools, resources and the protocol adapter raise these typed exceptions, which
are then mapped to protocol-level errors by the transport layers.

Key features:
- Error code enums (avoid typos)
- Severity levels (fatal, transient, user_error)
- Pydantic models for structured error details
- Boundary translation functions (exception -> MCPError -> JSON-RPC ErrorData)
"""

from enum import Enum
from typing import Any

from mcp.types import INTERNAL_ERROR as JSONRPC_INTERNAL_ERROR
from mcp.types import INVALID_PARAMS, ErrorData
from pydantic import BaseModel, ConfigDict, Field

# JSON-RPC codes used by the HTTP session router for its own envelopes
BAD_REQUEST = -32000
INTERNAL_ERROR = JSONRPC_INTERNAL_ERROR
# MCP reserves -32002 for "resource not found"
RESOURCE_NOT_FOUND = -32002

# ============================================================================
# Error Codes and Severity
# ============================================================================


class ErrorCode(str, Enum):
    """Enumeration of all error codes in the system."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TOOL_INPUT_ERROR = "TOOL_INPUT_ERROR"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"

    # Execution errors
    EXECUTION_ERROR = "EXECUTION_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorSeverity(str, Enum):
    """Error severity for retry and alerting decisions."""

    FATAL = "fatal"  # Unrecoverable, requires intervention
    TRANSIENT = "transient"  # Temporary, retryable
    USER_ERROR = "user_error"  # Caller mistake, not retryable


# ============================================================================
# Pydantic Error Models
# ============================================================================


class ErrorDetails(BaseModel):
    """Structured error details for serialization."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: ErrorCode = Field(..., description="Error code enum")
    message: str = Field(..., description="Human-readable error message")
    context: dict[str, Any] = Field(default_factory=dict, description="Additional context")
    severity: ErrorSeverity = Field(default=ErrorSeverity.FATAL, description="Error severity")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump()


# ============================================================================
# Base Exception Class
# ============================================================================


class MCPError(Exception):
    """Base class for all MCP server errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
        severity: ErrorSeverity = ErrorSeverity.FATAL,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.severity = severity

    def to_details(self) -> ErrorDetails:
        """Convert to structured ErrorDetails."""
        return ErrorDetails(
            code=self.code, message=self.message, context=self.details, severity=self.severity
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "error": self.code.value,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
        }


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(MCPError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        expected: str | None = None,
        received: Any | None = None,
    ) -> None:
        details = {}
        if field:
            details["field"] = field
        if expected:
            details["expected"] = expected
        if received is not None:
            details["received"] = str(received)
        super().__init__(
            message, ErrorCode.VALIDATION_ERROR, details, severity=ErrorSeverity.USER_ERROR
        )


class ToolInputError(ValidationError):
    """Tool arguments did not match the tool's input schema."""

    def __init__(self, message: str, tool_name: str, path: list[str] | None = None) -> None:
        super().__init__(message, field=".".join(path) if path else None)
        self.code = ErrorCode.TOOL_INPUT_ERROR
        self.details["tool"] = tool_name
        if path:
            self.details["path"] = path


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(MCPError):
    """Requested entity is not registered."""

    def __init__(
        self, message: str, resource_type: str | None = None, resource_id: str | None = None
    ) -> None:
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, ErrorCode.NOT_FOUND, details, severity=ErrorSeverity.USER_ERROR)


class UnknownToolError(NotFoundError):
    """call-tool named a tool that is not in the registry."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}", resource_type="tool", resource_id=tool_name)


class ResourceNotFoundError(NotFoundError):
    """read-resource named a uri that is not in the registry."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"Unknown resource: {uri}", resource_type="resource", resource_id=uri)


# ============================================================================
# Execution Errors
# ============================================================================


class ExecutionError(MCPError):
    """Tool or resource handler failed."""

    def __init__(self, tool_name: str, cause: Exception) -> None:
        super().__init__(
            f"Tool '{tool_name}' failed: {cause}",
            ErrorCode.EXECUTION_ERROR,
            {"tool_name": tool_name, "cause_type": type(cause).__name__, "cause": str(cause)},
            severity=ErrorSeverity.TRANSIENT,
        )


class InternalError(MCPError):
    """Internal server error (unexpected condition)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        details = {}
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__
        super().__init__(message, ErrorCode.INTERNAL_ERROR, details, severity=ErrorSeverity.FATAL)


# ============================================================================
# Boundary Translation Functions
# ============================================================================


def to_mcp_error(exc: Exception) -> MCPError:
    """
    Translate arbitrary exceptions to MCPError at boundaries.

    Args:
        exc: Any exception

    Returns:
        MCPError instance
    """
    # Already an MCPError, return as-is
    if isinstance(exc, MCPError):
        return exc

    if isinstance(exc, ValueError):
        return ValidationError(message=str(exc), expected="valid value")
    if isinstance(exc, KeyError):
        return NotFoundError(
            message=f"Key not found: {exc}", resource_type="key", resource_id=str(exc)
        )
    return InternalError(message=f"Unexpected error: {exc}", cause=exc)


def to_error_data(error: MCPError) -> ErrorData:
    """
    Convert MCPError to the JSON-RPC error object sent by the SDK.

    Args:
        error: MCPError instance

    Returns:
        ErrorData with a JSON-RPC code matching the error category and the
        serialized ErrorDetails as ``data``
    """
    if error.code == ErrorCode.NOT_FOUND:
        code = RESOURCE_NOT_FOUND
    elif error.code in (ErrorCode.VALIDATION_ERROR, ErrorCode.TOOL_INPUT_ERROR):
        code = INVALID_PARAMS
    else:
        code = INTERNAL_ERROR
    details = error.to_details()
    return ErrorData(code=code, message=details.message, data=details.model_dump(mode="json"))


def jsonrpc_error(code: int, message: str) -> dict[str, Any]:
    """Build a JSON-RPC 2.0 error envelope that is not tied to a request id."""
    return {
        "jsonrpc": "2.0",
        "error": {"code": code, "message": message},
        "id": None,
    }
