"""Custom exception types for the SonarQube notification bridge."""


class BridgeError(Exception):
    """Base exception for all recoverable notification bridge errors."""


class ConfigurationError(BridgeError):
    """Raised when runtime configuration values are missing or invalid."""


class MalformedPayloadError(BridgeError):
    """Raised when a webhook payload lacks structurally required fields."""


class SignatureError(BridgeError):
    """Raised when a webhook request signature does not match its body."""


class ApiError(BridgeError):
    """Raised when an outbound API request fails or returns an unexpected response."""


class HistoricalFetchError(ApiError):
    """Raised when the open-issues query against SonarQube fails."""


class DeliveryError(ApiError):
    """Raised when posting a message to the chat bot endpoint fails."""


class RenderError(BridgeError):
    """Raised when a report is rendered without commit or report data."""
