"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for reconciliation failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ContractError(PipelineError):
    """Raised when a manifest does not carry the fields the pipeline needs."""

    error_code = "CONTRACT_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that abort the current manifest."""

    error_code = "STAGE_ERROR"
