"""Feed assembly and formatting."""

from podsite.feed.assembler import FeedAssembler, join_fragments
from podsite.feed.formatter import FeedFormatter, FormatResult, minidom_pretty

__all__ = [
    "FeedAssembler",
    "FeedFormatter",
    "FormatResult",
    "join_fragments",
    "minidom_pretty",
]
