"""
Codecs - Textual forms of a board.

Three formats, all stable (saved and shared boards depend on them):
- text: one line per row, one native symbol per cell
- url: compact single-run code for share links
- snapshot: "W,H,marbles,<text board>" for session persistence
"""

from .text import encode_text, decode_text
from .url import encode_url, decode_url, share_query, UrlBoard, URL_DEFAULT_MARBLES
from .snapshot import encode_snapshot, decode_snapshot, SnapshotResult

__all__ = [
    "encode_text",
    "decode_text",
    "encode_url",
    "decode_url",
    "share_query",
    "UrlBoard",
    "URL_DEFAULT_MARBLES",
    "encode_snapshot",
    "decode_snapshot",
    "SnapshotResult",
]
