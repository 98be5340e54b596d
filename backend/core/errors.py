class TranscriptError(Exception):
    """Base class for errors raised by the evaluation core."""


class ConfigurationError(TranscriptError, ValueError):
    """Raised when the requirement configuration is missing or structurally empty."""


class DocumentMismatchError(TranscriptError, ValueError):
    """Raised when documents submitted together belong to different students."""
