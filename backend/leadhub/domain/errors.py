# leadhub/domain/errors.py
from __future__ import annotations


class LeadHubError(Exception):
    """
    Base for every failure the pipeline reports to a caller.

    `kind` is the machine-checkable tag; str(err) is the short message.
    """

    kind: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(LeadHubError):
    """Unknown connector type, incomplete mapping, malformed config. Raised before any I/O."""

    kind = "configuration"


class TransportError(LeadHubError):
    """Non-2xx HTTP, connection failure, unreadable payload."""

    kind = "transport"


class AlreadyRunningError(LeadHubError):
    kind = "already_running"

    def __init__(self, connector_id: str) -> None:
        super().__init__("connector is already running")
        self.connector_id = connector_id


class NotFoundError(LeadHubError):
    kind = "not_found"
