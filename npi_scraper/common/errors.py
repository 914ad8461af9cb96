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


class PageNotFoundError(StageError):
    """Raised when the registry serves its not-found page for an identifier."""

    error_code = "NOT_FOUND"

    def __init__(self, message: str = "404 Page Not Found") -> None:
        super().__init__(message)


class ExtractionError(PipelineError):
    """Raised when an extracted record cannot be turned into an output row."""

    error_code = "EXTRACTION_ERROR"


class MissingPrimaryTaxonomy(ExtractionError):
    error_code = "MISSING_PRIMARY_TAXONOMY"

    def __init__(self, message: str = "No primary taxonomy") -> None:
        super().__init__(message)


class ExportError(StageError):
    """Raised when one output artifact could not be written."""

    error_code = "EXPORT_ERROR"

    def __init__(self, path, message: str) -> None:
        super().__init__(f"could not write {path}: {message}")
        self.path = path
