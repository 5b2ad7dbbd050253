"""Custom exceptions for the node age controller."""


class NodeAgeControllerError(Exception):
    """Base exception for all node age controller errors."""

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class KubernetesError(NodeAgeControllerError):
    """Exception raised for Kubernetes API errors."""

    pass


class NodeNotFoundError(KubernetesError):
    """The node disappeared between enumeration and fetch."""

    pass


class ConflictError(KubernetesError):
    """The node was modified concurrently; the update used a stale resource version."""

    pass


class TransientError(KubernetesError):
    """Network or API failure that may succeed on a later attempt."""

    pass


class ConfigurationError(NodeAgeControllerError):
    """Exception raised for configuration errors."""

    pass
