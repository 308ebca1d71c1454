class FeedFetchError(Exception):
    """Raised when a feed cannot be retrieved after all retry attempts."""


class FeedParseError(Exception):
    """Raised when a feed body cannot be parsed as RSS/Atom."""


class ArchiveError(Exception):
    """Raised when a dated archive file cannot be read back."""


class SummarizerError(Exception):
    """Raised by a summarizer backend that cannot produce a digest."""
