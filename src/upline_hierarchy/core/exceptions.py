class PipelineError(Exception):
    """Base exception for pipeline failures."""


class ConfigurationError(PipelineError):
    """Raised when the resolver configuration is invalid."""


class ContactLoadError(PipelineError):
    """Raised when a contacts file cannot be read or parsed."""


class ContactNotFoundError(PipelineError):
    """Raised when an update targets an unknown or synthetic node id."""


class PipelineExecutionError(PipelineError):
    """Raised when the file-based pipeline fails."""
