"""Formatter options."""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class FormatConfig:
    """Immutable layout options for one format call.

    Options that can be switched off (`split_brace_threshold`, `comment_width`)
    use `None` for "off".
    """

    max_width: int = 120
    root_splits: bool = False
    split_brace_threshold: int | None = 1
    split_attributes: bool = True
    split_where: bool = True
    comment_width: int | None = 80
    comment_errors_fatal: bool = False
    max_blank_lines: int = 1
    indent_width: int = 4

    def __post_init__(self) -> None:
        if self.max_width < 1:
            raise ValueError("max_width must be positive")
        if self.split_brace_threshold is not None and self.split_brace_threshold < 0:
            raise ValueError("split_brace_threshold cannot be negative")
        if self.comment_width is not None and self.comment_width < 1:
            raise ValueError("comment_width must be positive")
        if self.max_blank_lines < 0:
            raise ValueError("max_blank_lines cannot be negative")
        if self.indent_width < 0:
            raise ValueError("indent_width cannot be negative")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "FormatConfig":
        """Build a config from a `rsfmt.toml` table; `"off"` or `false` switches an optional limit off."""
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown format option(s): {', '.join(unknown)}")

        resolved: dict[str, Any] = {}
        for name, value in values.items():
            if name in ("split_brace_threshold", "comment_width"):
                resolved[name] = _optional_limit(name, value)
            elif name in ("root_splits", "split_attributes", "split_where", "comment_errors_fatal"):
                resolved[name] = parse_switch(name, value)
            else:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"{name} must be an integer, got {value!r}")
                resolved[name] = value
        return cls(**resolved)

    def with_overrides(self, **overrides: Any) -> "FormatConfig":
        return replace(self, **overrides)


def _optional_limit(name: str, value: Any) -> int | None:
    if value is None or value is False or value == "off":
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer or 'off', got {value!r}")
    return value


def parse_switch(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in ("on", "true", "yes"):
        return True
    if value in ("off", "false", "no"):
        return False
    raise ValueError(f"{name} must be on/off, got {value!r}")


def parse_limit(name: str, value: str) -> int | None:
    """Parse a command-line `N|off` value."""
    if value == "off":
        return None
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer or 'off', got {value!r}") from None
    return _optional_limit(name, number)
