"""
Feed errors

Raised while refreshing the directory. Both are caught at the refresh
boundary; query paths never raise them.
"""


class FeedError(Exception):
    """Base class for feed refresh failures"""

    def __init__(self, feed: str, message: str):
        super().__init__(f"[{feed}] {message}")
        self.feed = feed
        self.message = message


class FetchError(FeedError):
    """Raised when a feed cannot be downloaded (network error, timeout, HTTP error)"""
    pass


class ParseError(FeedError):
    """Raised when feed content does not have the expected structure"""
    pass
