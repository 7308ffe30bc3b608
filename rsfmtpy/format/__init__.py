"""Layout engine: split groups, comment reattachment and rendering."""

from rsfmtpy.format.config import FormatConfig
from rsfmtpy.format.errors import CommentPlacementError, FormatError
from rsfmtpy.format.runner import FormatResult, format_str, format_tree, run_format

__all__ = [
    "CommentPlacementError",
    "FormatConfig",
    "FormatError",
    "FormatResult",
    "format_str",
    "format_tree",
    "run_format",
]
