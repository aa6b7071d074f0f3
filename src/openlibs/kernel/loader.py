"""
Bootstrap Loader: installs a manifest of libraries into an interpreter state.

Two phases:
1. Eager: call each constructor in manifest order with the state and its name,
   discarding results. Constructors install themselves.
2. Lazy: store each preload constructor, uncalled, under its name in the
   state's ``_PRELOAD`` table. Materialization belongs to the host's module
   resolution (``require``), never to the loader.

A constructor failure stops the eager walk. Libraries before it stay
installed, nothing after it runs, and the lazy phase is skipped. There is no
rollback; the host decides whether a partial state is usable.

If ``_PRELOAD`` already exists but is not a table, staging fails the same
way, with position 0 in the error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..logging import get_logger
from .schema import InstallError, LoadPhase, ModuleDescriptor
from .state import PRELOAD_KEY, InterpreterState, ScriptError

log = get_logger(__name__)


@dataclass(frozen=True)
class LibraryManifest:
    """The ordered eager list and the preload table for one bootstrap."""

    eager: Tuple[ModuleDescriptor, ...] = ()
    preload: Tuple[ModuleDescriptor, ...] = ()

    def names(self) -> List[str]:
        return [d.name for d in self.eager] + [d.name for d in self.preload]

    def without(self, *names: str) -> "LibraryManifest":
        """Derive a manifest with the named entries removed from both phases."""
        excluded = set(names)
        return LibraryManifest(
            eager=tuple(d for d in self.eager if d.name not in excluded),
            preload=tuple(d for d in self.preload if d.name not in excluded),
        )


class BootstrapError(RuntimeError):
    """Raised by ``BootstrapResult.raise_for_error`` for a failed bootstrap."""

    def __init__(self, error: InstallError) -> None:
        super().__init__(error.describe())
        self.error = error


@dataclass
class BootstrapResult:
    """Outcome of a bootstrap call."""

    phase: LoadPhase = LoadPhase.NOT_STARTED
    installed: List[str] = field(default_factory=list)
    staged: List[str] = field(default_factory=list)
    error: Optional[InstallError] = None

    @property
    def ok(self) -> bool:
        return self.phase == LoadPhase.COMPLETE

    def raise_for_error(self) -> "BootstrapResult":
        if self.error is not None:
            raise BootstrapError(self.error)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {
            "ok": self.ok,
            "phase": self.phase.value,
            "installed": list(self.installed),
            "staged": list(self.staged),
        }
        if self.error is not None:
            result["error"] = self.error.model_dump()
        return result


def install_libraries(state: InterpreterState, manifest: LibraryManifest) -> BootstrapResult:
    """Run both bootstrap phases of ``manifest`` against ``state``."""
    result = BootstrapResult(phase=LoadPhase.EAGER_LOADING)

    for position, descriptor in enumerate(manifest.eager, start=1):
        try:
            state.call(descriptor.constructor, state, descriptor.name)
        except Exception as exc:
            result.error = _install_error(descriptor, position, exc)
            result.phase = LoadPhase.FAILED
            log.warning(
                "library_install_failed",
                module=result.error.display_name,
                position=position,
                error=result.error.message,
            )
            return result
        result.installed.append(descriptor.name)
        log.debug("library_installed", module=descriptor.name or "_G", position=position)

    result.phase = LoadPhase.LAZY_STAGING
    try:
        preload = state.find_table(state.registry, PRELOAD_KEY, size_hint=len(manifest.preload))
    except ScriptError as exc:
        # Position 0: the failure belongs to staging, not to any constructor
        result.error = InstallError(
            module=PRELOAD_KEY,
            position=0,
            message=str(exc),
            details={"exception": type(exc).__name__, "script_kind": exc.kind},
        )
        result.phase = LoadPhase.FAILED
        log.warning("library_staging_failed", error=result.error.message)
        return result
    for descriptor in manifest.preload:
        preload[descriptor.name] = descriptor.constructor
        result.staged.append(descriptor.name)
    del preload
    log.debug("libraries_staged", staged=result.staged)

    result.phase = LoadPhase.COMPLETE
    log.debug("bootstrap_complete", installed=len(result.installed), staged=len(result.staged))
    return result


def _install_error(descriptor: ModuleDescriptor, position: int, exc: Exception) -> InstallError:
    details: Dict[str, Any] = {"exception": type(exc).__name__}
    if isinstance(exc, ScriptError):
        details["script_kind"] = exc.kind
    return InstallError(
        module=descriptor.name,
        position=position,
        message=str(exc),
        details=details,
    )
