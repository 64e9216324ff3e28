"""Error taxonomy for variant runs."""

from __future__ import annotations


class VariantShotError(Exception):
    """Base class for every error raised by variantshot."""


class ConfigurationError(VariantShotError, ValueError):
    """Empty or malformed variant set, or unusable configuration."""


class DuplicateArtifactError(ConfigurationError):
    """Two invocations in one run resolved to the same artifact name."""

    def __init__(self, artifact_name: str) -> None:
        super().__init__(
            f"Artifact name '{artifact_name}' was already captured in this run; "
            "each (suite, case, variant) may capture exactly one artifact."
        )
        self.artifact_name = artifact_name


class IdentityResolutionFailure(VariantShotError, RuntimeError):
    """No recognized test function was found while walking the call stack."""

    def __init__(self, attempted_name: str, frames: list[str] | None = None) -> None:
        walked = ", ".join(frames or []) or "<no frames>"
        super().__init__(
            f"Could not resolve the calling test for artifact '{attempted_name}'. "
            "run_variant_test() must be called from a test function "
            f"(walked: {walked})."
        )
        self.attempted_name = attempted_name
        self.frames = list(frames or [])


class ComparisonFailure(VariantShotError, AssertionError):
    """Captured surface does not match the stored baseline."""

    def __init__(self, artifact_name: str, detail: str) -> None:
        super().__init__(f"Snapshot '{artifact_name}' does not match baseline: {detail}")
        self.artifact_name = artifact_name
        self.detail = detail


class EmptyVariantSetWarning(UserWarning):
    """Emitted when a test resolves to zero variants."""
