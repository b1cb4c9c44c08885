"""
venue-bot: Telegram relay for nearby venue searches.

A queue-backed worker that answers location messages with nearby venues from
Foursquare and remembers the last result set per chat for follow-up commands.
"""

__version__ = "0.1.0"
