"""
Exceptions raised by the BizNews service.
"""


class BizNewsError(Exception):
    """Base class for all service errors."""


class UpstreamError(BizNewsError):
    """The headline provider was unreachable or answered with an error status."""

    def __init__(self, message: str = "Failed to fetch top headlines", status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(BizNewsError):
    """A required setting is missing or invalid."""


class PaymentError(BizNewsError):
    """A payment payload was missing or rejected by the facilitator."""
