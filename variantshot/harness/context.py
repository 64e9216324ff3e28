"""Presentation context applied to content before rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..utils import parse_flag
from ..variants import Variant


@dataclass(frozen=True)
class PresentationContext:
    variant: Variant

    @property
    def params(self) -> Mapping[str, Any]:
        return self.variant.params

    @property
    def dark_mode(self) -> bool:
        return parse_flag(self.params.get("dark_mode", False), "dark_mode")

    @property
    def background(self) -> str:
        return str(self.params.get("background") or ("#121212" if self.dark_mode else "#ffffff"))

    @property
    def foreground(self) -> str:
        return str(self.params.get("foreground") or ("#e6e1e5" if self.dark_mode else "#1b1b1f"))


@dataclass(frozen=True)
class Themed:
    """Content wrapped in the presentation context of one variant."""

    content: Any
    context: PresentationContext


def apply_variant(content: Any, variant: Variant) -> Themed:
    return Themed(content=content, context=PresentationContext(variant))
