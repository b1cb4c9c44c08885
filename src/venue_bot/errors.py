"""
Exceptions raised by venue-bot components.
"""


class VenueBotError(Exception):
    """Base class for venue-bot errors."""


class ParseError(VenueBotError):
    """An inbound payload could not be decoded into a message."""


class GatewayError(VenueBotError):
    """The venue API was unreachable or returned an unusable response."""


class DeliveryError(VenueBotError):
    """A Telegram Bot API call failed."""


class LookupFailed(VenueBotError):
    """A follow-up command referenced a venue that is not cached."""


class SessionMiss(LookupFailed):
    """No search results are cached for the conversation."""


class IndexOutOfRange(LookupFailed):
    """The requested venue index is outside the cached results."""
