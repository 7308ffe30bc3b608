"""Indentation depth."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Alignment:
    depth: int = 0

    def indent(self) -> "Alignment":
        return Alignment(self.depth + 1)

    def columns(self, indent_width: int) -> int:
        return self.depth * indent_width


ROOT_ALIGNMENT = Alignment()
