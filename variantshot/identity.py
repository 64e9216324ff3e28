"""Test identity resolution and artifact naming.

Identity is normally injected by the runner integration (the pytest plugin
builds it from the collected item). When no identity is injected the harness
falls back to walking the call stack for the nearest frame whose code object
belongs to a recognized test function.
"""

from __future__ import annotations

import fnmatch
import inspect
import sys
from dataclasses import dataclass
from types import FrameType
from typing import Any, Callable, Sequence

from .errors import IdentityResolutionFailure
from .variants import Variant


UNRESOLVED = "<unresolved>"
DEFAULT_FUNCTION_PATTERNS = ("test",)
VARIANT_TEST_ATTR = "__variantshot_test__"

_PACKAGE = __name__.rpartition(".")[0]


@dataclass(frozen=True)
class TestIdentity:
    suite: str
    case: str

    __test__ = False

    def artifact_name(self, variant: Variant) -> str:
        return artifact_name(self.suite, self.case, variant)


def artifact_name(suite: str, case: str, variant: Variant) -> str:
    return f"{suite}_{case}_{variant.slug}"


def variant_test(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark ``func`` as a test for runners that have no marker of their own."""

    setattr(func, VARIANT_TEST_ATTR, True)
    return func


def suite_name(module: str, qualname_parts: Sequence[str], qualified: bool = False) -> str:
    if qualname_parts:
        suite = ".".join(qualname_parts)
        return f"{module}.{suite}" if qualified else suite
    return module


def identity_for(func: Callable[..., Any], cls: type | None = None, qualified: bool = False) -> TestIdentity:
    """Identity of a test function, optionally bound to its collecting class."""

    module = getattr(func, "__module__", None) or "<unknown>"
    if cls is not None:
        return TestIdentity(suite_name(cls.__module__, cls.__qualname__.split("."), qualified), func.__name__)
    parts = func.__qualname__.split(".")[:-1]
    return TestIdentity(suite_name(module, parts, qualified), func.__name__)


def is_test_function(func: Any, patterns: Sequence[str] = DEFAULT_FUNCTION_PATTERNS) -> bool:
    if getattr(func, VARIANT_TEST_ATTR, False):
        return True
    if getattr(func, "pytestmark", None):
        return True
    name = getattr(func, "__name__", "")
    return any(_name_matches(name, pattern) for pattern in patterns)


def resolve_identity(
    frame: FrameType | None = None,
    *,
    patterns: Sequence[str] = DEFAULT_FUNCTION_PATTERNS,
    qualified: bool = False,
    variant: Variant | None = None,
) -> TestIdentity:
    """Walk outward from ``frame`` (default: the caller) to the calling test.

    Frames that belong to this package are skipped. Raises
    ``IdentityResolutionFailure`` when the walk runs out of frames.
    """

    current = frame if frame is not None else sys._getframe(1)
    walked: list[str] = []
    while current is not None:
        if not _is_internal(current):
            code = current.f_code
            walked.append(code.co_qualname)
            func = _function_for_code(current)
            if func is not None and is_test_function(func, patterns):
                module = current.f_globals.get("__name__", "<unknown>")
                parts = code.co_qualname.split(".")[:-1]
                return TestIdentity(suite_name(module, parts, qualified), code.co_name)
        current = current.f_back
    attempted = f"{UNRESOLVED}_{UNRESOLVED}_{variant.slug if variant else UNRESOLVED}"
    raise IdentityResolutionFailure(attempted, walked)


def _is_internal(frame: FrameType) -> bool:
    module = frame.f_globals.get("__name__", "")
    return module == _PACKAGE or module.startswith(_PACKAGE + ".")


def _function_for_code(frame: FrameType) -> Any:
    """Look up the function object that owns the frame's code, or None."""

    code = frame.f_code
    parts = code.co_qualname.split(".")
    if "<locals>" in parts or any(p.startswith("<") for p in parts):
        return None
    obj: Any = frame.f_globals.get(parts[0])
    for part in parts[1:]:
        if obj is None:
            return None
        try:
            obj = inspect.getattr_static(obj, part)
        except AttributeError:
            return None
    if isinstance(obj, (staticmethod, classmethod)):
        obj = obj.__func__
    func = inspect.unwrap(obj) if callable(obj) else None
    if func is None or getattr(func, "__code__", None) is not code:
        return None
    return obj


def _name_matches(name: str, pattern: str) -> bool:
    # pytest semantics: plain patterns are prefixes, glob patterns are matched whole
    if any(ch in pattern for ch in "*?["):
        return fnmatch.fnmatch(name, pattern)
    return name.startswith(pattern)
