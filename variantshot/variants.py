"""Presentation variants and the provider that expands tests over them.

A variant set is closed: it is fully known when tests are collected and every
test that opts in runs exactly once per member. Sets can be declared in
configuration, e.g.

    [tool.variantshot.variant_sets.density.Compact]
    scale = 0.85

    [tool.variantshot.variant_sets.density.Comfortable]
    scale = 1.0

Declaration order is preserved and becomes the run order.
"""

from __future__ import annotations

import re
import warnings
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Sequence, TypeVar

from .errors import ConfigurationError, EmptyVariantSetWarning


_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.\-]*$")

T = TypeVar("T")


@dataclass(frozen=True)
class Variant:
    name: str
    params: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not _NAME_RE.match(self.name):
            raise ConfigurationError(
                f"Invalid variant name {self.name!r}: use letters, digits, '.' or '-' "
                "(underscores separate artifact name segments)."
            )
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def slug(self) -> str:
        return self.name.lower()

    def __str__(self) -> str:
        return self.name


class VariantSet(Sequence[Variant]):
    """Ordered, closed collection of variants."""

    def __init__(self, name: str, variants: Iterable[Variant]) -> None:
        self.name = name
        self._variants = tuple(variants)
        if not self._variants:
            raise ConfigurationError(f"Variant set '{name}' is empty.")
        seen: dict[str, str] = {}
        for variant in self._variants:
            if variant.slug in seen:
                raise ConfigurationError(
                    f"Variant set '{name}' declares '{seen[variant.slug]}' and '{variant.name}', "
                    "which produce the same artifact suffix."
                )
            seen[variant.slug] = variant.name

    def __getitem__(self, index):  # type: ignore[override]
        return self._variants[index]

    def __len__(self) -> int:
        return len(self._variants)

    def __iter__(self) -> Iterator[Variant]:
        return iter(self._variants)

    def __repr__(self) -> str:
        names = ", ".join(v.name for v in self._variants)
        return f"VariantSet({self.name!r}, [{names}])"

    def names(self) -> list[str]:
        return [v.name for v in self._variants]

    def get(self, name: str) -> Variant | None:
        wanted = name.strip().lower()
        for variant in self._variants:
            if variant.slug == wanted:
                return variant
        return None

    def select(self, names: Iterable[str]) -> list[Variant]:
        """Return the members named in ``names``, in set order.

        Unknown names are a configuration error. The result may be empty; the
        caller decides how to report that.
        """

        wanted = [str(n) for n in names]
        unknown = [n for n in wanted if self.get(n) is None]
        if unknown:
            raise ConfigurationError(
                f"Unknown variant(s) {', '.join(unknown)} for set '{self.name}' "
                f"(available: {', '.join(self.names())})."
            )
        slugs = {n.strip().lower() for n in wanted}
        return [v for v in self._variants if v.slug in slugs]


THEME_VARIANTS = VariantSet(
    "theme",
    [
        Variant("Light", {"dark_mode": False, "background": "#ffffff", "foreground": "#1b1b1f"}),
        Variant("Dark", {"dark_mode": True, "background": "#121212", "foreground": "#e6e1e5"}),
    ],
)


def builtin_variant_sets() -> dict[str, VariantSet]:
    return {THEME_VARIANTS.name: THEME_VARIANTS}


def parse_variant_sets(payload: Any) -> dict[str, VariantSet]:
    """Parse ``{set_name: {variant_name: {param: value}}}`` into variant sets."""

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError("variant_sets must be a table of tables.")
    out: dict[str, VariantSet] = {}
    for set_name, members in payload.items():
        if not isinstance(members, Mapping):
            raise ConfigurationError(f"Variant set '{set_name}' must be a table of variants.")
        variants = []
        for variant_name, params in members.items():
            if params is None:
                params = {}
            if not isinstance(params, Mapping):
                raise ConfigurationError(
                    f"Variant '{set_name}.{variant_name}' must be a table of presentation parameters."
                )
            variants.append(Variant(str(variant_name), dict(params)))
        out[str(set_name)] = VariantSet(str(set_name), variants)
    return out


class VariantProvider:
    """Resolves the variant set a test runs under."""

    def __init__(
        self,
        variant_sets: Mapping[str, VariantSet] | None = None,
        default_set: str = "theme",
        only: Sequence[str] | None = None,
    ) -> None:
        self.variant_sets = dict(builtin_variant_sets())
        self.variant_sets.update(variant_sets or {})
        if default_set not in self.variant_sets:
            raise ConfigurationError(
                f"Unknown variant set '{default_set}' (available: {', '.join(sorted(self.variant_sets))})."
            )
        self.default_set = default_set
        self.only = list(only) if only else None

    def variants_for(self, set_name: str | None = None, only: Sequence[str] | None = None) -> list[Variant]:
        name = set_name or self.default_set
        variant_set = self.variant_sets.get(name)
        if variant_set is None:
            raise ConfigurationError(
                f"Unknown variant set '{name}' (available: {', '.join(sorted(self.variant_sets))})."
            )
        selected = list(variant_set)
        if only is not None:
            selected = variant_set.select(only)
        if self.only is not None:
            allowed = {n.strip().lower() for n in self.only}
            selected = [v for v in selected if v.slug in allowed]
        if not selected:
            message = f"Variant set '{name}' resolved to zero variants; nothing would run."
            warnings.warn(message, EmptyVariantSetWarning, stacklevel=2)
            raise ConfigurationError(message)
        return selected

    def expand(self, tests: Iterable[T], set_name: str | None = None) -> list[tuple[T, Variant]]:
        """Cartesian product of ``tests`` and the active variants, test-major."""

        variants = self.variants_for(set_name)
        return [(test, variant) for test in tests for variant in variants]
