class ClusterValidationError(Exception):
    """Validation could not be performed; no report is produced."""


class NoInstanceGroupsError(ClusterValidationError, ValueError):
    pass


class EndpointResolutionError(ClusterValidationError):
    """The API host could not be parsed or resolved."""


class NodeListError(ClusterValidationError):
    pass


class CloudInventoryError(ClusterValidationError):
    pass


class PodListError(ClusterValidationError):
    """The pod stream failed before it was fully consumed."""


class ValidationCancelledError(ClusterValidationError):
    pass


class ConfigError(Exception):
    """The cluster descriptor could not be loaded."""
