"""Width-driven Rust source formatter."""

from rsfmtpy.format import FormatConfig, FormatError, FormatResult, format_str, format_tree

__version__ = "0.1.0"

__all__ = [
    "FormatConfig",
    "FormatError",
    "FormatResult",
    "__version__",
    "format_str",
    "format_tree",
]
