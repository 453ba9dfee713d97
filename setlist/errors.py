"""Exception hierarchy for setlist collection."""


class SetlistError(Exception):
    """Base class for all collector errors."""


class InvalidFormat(SetlistError, ValueError):
    """A timestamp string is not made of 2 or 3 colon-separated integers."""


class NotFound(SetlistError):
    """The YouTube API returned no items for a video or channel id."""


class MissingCredential(SetlistError):
    """A required API key is not configured."""


class FetchError(SetlistError):
    """A YouTube API request returned a non-success status."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code
