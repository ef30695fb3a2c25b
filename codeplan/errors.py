"""
Error taxonomy for the plan pipeline.

Generation-time errors (ConfigError, TransportError, ProtocolError) abort the
generate flow. Execution-time errors are caught at the executor's per-step
boundary and become that step's failure message.
"""


class CodePlanError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(CodePlanError):
    """Required configuration (e.g. the API credential) is missing."""


class TransportError(CodePlanError):
    """The network call to the upstream failed."""


class ProtocolError(CodePlanError):
    """Upstream answered with a non-success status or an unusable body."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class ParseError(CodePlanError):
    """LLM text could not be turned into an execution plan."""


class FileSystemError(CodePlanError):
    """A file could not be read, created or written."""
