"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for feed processing failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class StageError(PipelineError):
    """Raised for failures that abort the operation in progress."""

    error_code = "STAGE_ERROR"


class TransportError(StageError):
    """Raised when a feed could not be fetched."""

    error_code = "TRANSPORT_ERROR"


class MalformedFeedError(PipelineError):
    """Raised when a feed document does not have the expected structure."""

    error_code = "MALFORMED_FEED"


class ContractError(PipelineError):
    """Raised when pivot or join invariants are broken."""

    error_code = "CONTRACT_ERROR"


class DuplicateAttributeError(ContractError):
    error_code = "DUPLICATE_ATTRIBUTE"


class AmbiguousLocationError(ContractError):
    error_code = "AMBIGUOUS_LOCATION"


class InputError(PipelineError):
    """Raised for bad caller input."""

    error_code = "INPUT_ERROR"


class UnknownRegionError(InputError):
    error_code = "UNKNOWN_REGION"


class NoStationFoundError(InputError):
    error_code = "NO_STATION_FOUND"
