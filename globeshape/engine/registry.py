"""Export pass registry — every pass is a plain function registered via decorator.

Usage:
    @export_pass(id="P4", stage=Stage.STITCHING, dependencies=["P3"])
    def build_adjacency(ctx: ExportContext) -> None:
        ...

The pipeline runs the registered passes in dependency order.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from globeshape.engine.context import ExportContext

logger = logging.getLogger(__name__)


class Stage(enum.IntEnum):
    SUBDIVISION = 0
    STITCHING = 1
    ASSEMBLY = 2


@dataclass
class PassSpec:
    id: str
    stage: Stage
    fn: Callable[["ExportContext"], None]
    dependencies: list[str] = field(default_factory=list)
    description: str = ""


class PassRegistry:
    """Registry of export passes, ordered by their dependencies."""

    def __init__(self) -> None:
        self._passes: dict[str, PassSpec] = {}

    def register(self, spec: PassSpec) -> None:
        if spec.id in self._passes:
            raise ValueError(f"Duplicate pass ID: {spec.id}")
        self._passes[spec.id] = spec
        logger.debug("Registered pass %s (%s)", spec.id, spec.stage.name)

    def get(self, pass_id: str) -> PassSpec:
        return self._passes[pass_id]

    def get_stage(self, stage: Stage) -> list[PassSpec]:
        return sorted((s for s in self._passes.values() if s.stage == stage), key=lambda s: s.id)

    def all(self) -> list[PassSpec]:
        return sorted(self._passes.values(), key=lambda s: (s.stage, s.id))

    def resolve_order(self) -> list[PassSpec]:
        """Topological sort (Kahn) with ties broken by pass ID."""
        pending = {pid: set(spec.dependencies) & self._passes.keys() for pid, spec in self._passes.items()}
        ordered: list[PassSpec] = []

        ready = sorted(pid for pid, deps in pending.items() if not deps)
        while ready:
            pid = ready.pop(0)
            ordered.append(self._passes[pid])
            del pending[pid]
            for other, deps in pending.items():
                if pid in deps:
                    deps.discard(pid)
                    if not deps:
                        ready.append(other)
            ready.sort()

        if pending:
            raise ValueError(f"Circular dependency detected among: {set(pending)}")
        return ordered

    @property
    def count(self) -> int:
        return len(self._passes)


# Module-level registry the built-in passes register into
_registry = PassRegistry()


def get_registry() -> PassRegistry:
    return _registry


def export_pass(
    *,
    id: str,
    stage: Stage,
    dependencies: list[str] | None = None,
    description: str = "",
):
    """Decorator to register an export pass."""

    def decorator(fn: Callable[["ExportContext"], None]):
        _registry.register(
            PassSpec(
                id=id,
                stage=stage,
                fn=fn,
                dependencies=dependencies or [],
                description=description,
            )
        )
        return fn

    return decorator
