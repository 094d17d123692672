"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that should halt in strict mode."""

    error_code = "STAGE_ERROR"


class InvalidXmlError(PipelineError):
    """Raised when the outer response document cannot be parsed.

    No binaries can be located without a valid document, so this aborts the
    whole extraction.
    """

    error_code = "INVALID_XML"


class DecodeError(PipelineError):
    """Raised for malformed base64 payloads."""

    error_code = "DECODE_ERROR"


class UnsupportedOperationError(PipelineError):
    """Raised when the runtime cannot perform gzip decompression."""

    error_code = "UNSUPPORTED_OPERATION"


class DecompressionError(PipelineError):
    """Raised for corrupt or truncated gzip streams."""

    error_code = "DECOMPRESSION_ERROR"


class ExportStaleStateError(PipelineError):
    """Raised when an export is requested without a matching decode session."""

    error_code = "EXPORT_STALE_STATE"


class FetchError(StageError):
    """Raised when the response XML cannot be fetched."""

    error_code = "FETCH_ERROR"
