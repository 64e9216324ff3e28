"""Run visual snapshot tests once per presentation variant."""

from __future__ import annotations

from .capture.base import CaptureResult, SnapshotComparator
from .capture.image import ImageSnapshotComparator
from .capture.render import TextContent, render_surface
from .errors import (
    ComparisonFailure,
    ConfigurationError,
    DuplicateArtifactError,
    EmptyVariantSetWarning,
    IdentityResolutionFailure,
    VariantShotError,
)
from .harness.context import PresentationContext, Themed
from .harness.runner import VariantHarness
from .identity import TestIdentity, artifact_name, resolve_identity, variant_test
from .variants import THEME_VARIANTS, Variant, VariantProvider, VariantSet

__all__ = [
    "CaptureResult",
    "ComparisonFailure",
    "ConfigurationError",
    "DuplicateArtifactError",
    "EmptyVariantSetWarning",
    "IdentityResolutionFailure",
    "ImageSnapshotComparator",
    "PresentationContext",
    "SnapshotComparator",
    "THEME_VARIANTS",
    "TestIdentity",
    "TextContent",
    "Themed",
    "Variant",
    "VariantHarness",
    "VariantProvider",
    "VariantSet",
    "VariantShotError",
    "artifact_name",
    "render_surface",
    "resolve_identity",
    "variant_test",
]
