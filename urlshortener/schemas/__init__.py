# re-export common schemas for simpler imports
from .url import ShortenRequest, ShortenResponse, ExpandResponse

__all__ = [
    "ShortenRequest",
    "ShortenResponse",
    "ExpandResponse",
]
