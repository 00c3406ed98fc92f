"""Error taxonomy for the legacy federation bridge.

Only ``LegacyTransportError`` and ``LegacyUserNotFound`` cross the remote
client boundary; the resolver turns both into an absent result, so callers of
the federation service never see them. Credential failures are plain ``False``
results, not exceptions.
"""


class LegacyBridgeError(Exception):
    """Base class for federation bridge errors."""


class LegacyUserNotFound(LegacyBridgeError):
    """The legacy facade confirmed that the user does not exist."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Legacy user '{username}' not found")
        self.username = username


class LegacyTransportError(LegacyBridgeError):
    """The legacy facade could not be reached or answered unexpectedly.

    This is never evidence that the user is absent.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedIdError(LegacyBridgeError, ValueError):
    """An opaque user id could not be decoded to an external identifier."""

