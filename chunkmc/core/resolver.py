"""Dependency resolution for chunkmc.

Given a root mod, the :class:`Resolver` walks its declared dependencies
depth-first, asks the :class:`~chunkmc.core.provider.ModInfoProvider` for
concrete releases, and builds a :class:`~chunkmc.core.graph.DependencyGraph`.

Failure policy:

* A *required* dependency that cannot be found, that closes a cycle, or
  whose constraint cannot be parsed aborts the whole call with a
  :class:`~chunkmc.exceptions.ResolutionError`. No partial graph is
  returned.
* Anything going wrong inside an *optional* branch drops that branch and
  resolution carries on.
* Version conflicts, incompatible pairs and loader mismatches are
  collected into the graph; the caller decides what to do with them.

Resolved subtrees are memoized by ``id@version`` in a
:class:`ResolutionCache` owned by the resolver. The cache outlives a
single :meth:`Resolver.resolve` call, and a memoized subtree does not
report its problems a second time, so reuse one resolver only for related
resolutions (or call :meth:`Resolver.clear_cache` in between).

Typical usage::

    provider = load_index(Path("mods.json"))
    resolver = Resolver(provider, ResolutionOptions(target_loader=LoaderType.FABRIC,
                                                    target_loader_version="0.15.7"))
    graph = resolver.resolve("sodium", "0.5.8")
    if graph.has_errors():
        for line in graph.get_errors():
            print(line)
"""

from __future__ import annotations

import threading
from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple, TypeVar

from chunkmc.constants import (
    DEFAULT_INCLUDE_OPTIONAL,
    DEFAULT_MAX_DEPTH,
    DEFAULT_STRATEGY,
    WILDCARD,
)
from chunkmc.core.graph import DependencyGraph
from chunkmc.core.provider import ModInfoProvider
from chunkmc.exceptions import ResolutionError, ResolutionErrorType
from chunkmc.models import (
    Dependency,
    DependencyType,
    IncompatiblePair,
    LoaderConflict,
    LoaderType,
    ModInfo,
    ResolvedDependency,
    Version,
    VersionConflict,
    parse_version,
    parse_version_constraints,
)
from chunkmc.utils.logger import get_logger

logger = get_logger("resolver")

T = TypeVar("T")

# Public API
__all__ = [
    "Resolver",
    "ResolutionCache",
    "ResolutionOptions",
    "ResolutionStrategy",
    "check_loader_compatibility",
]


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class ResolutionStrategy(Enum):
    """Which release to pick when several satisfy a constraint."""

    LATEST = "latest"
    MINIMAL = "minimal"


@dataclass
class ResolutionOptions:
    """Resolver behaviour switches.

    Attributes:
        strategy: Version selection rule.
        include_optional: Resolve optional dependencies too.
        max_depth: Recursion limit; nodes at this depth become leaves.
            ``0`` means unlimited.
        target_loader: Loader being installed. ``None`` disables loader checks.
        target_loader_version: Version of that loader.
        minecraft_version: Target Minecraft version (informational).
    """

    strategy: ResolutionStrategy = ResolutionStrategy(DEFAULT_STRATEGY)
    include_optional: bool = DEFAULT_INCLUDE_OPTIONAL
    max_depth: int = DEFAULT_MAX_DEPTH
    target_loader: Optional[LoaderType] = None
    target_loader_version: str = ""
    minecraft_version: str = ""


# ---------------------------------------------------------------------------
# Memoization cache
# ---------------------------------------------------------------------------


class ResolutionCache:
    """Thread-safe ``id@version`` → resolved subtree memo.

    Entries are copied on the way in and on the way out so that every
    tree handed to a caller owns all of its nodes.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._resolved: Dict[str, ResolvedDependency] = {}

    def get(self, key: str) -> Optional[ResolvedDependency]:
        with self._lock:
            cached = self._resolved.get(key)
        return cached.clone() if cached is not None else None

    def set(self, key: str, node: ResolvedDependency) -> None:
        snapshot = node.clone()
        with self._lock:
            self._resolved[key] = snapshot

    def clear(self) -> None:
        with self._lock:
            self._resolved.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._resolved

    def __len__(self) -> int:
        with self._lock:
            return len(self._resolved)


# ---------------------------------------------------------------------------
# Loader compatibility
# ---------------------------------------------------------------------------


def check_loader_compatibility(
    mod: ModInfo,
    target_loader: LoaderType,
    target_version: str = "",
) -> Optional[LoaderConflict]:
    """Check one release against the loader being installed.

    A release that declares no loader requirements is assumed to run
    anywhere. Otherwise it must name *target_loader*; if that entry has a
    version constraint and *target_version* is known, the version must
    satisfy it.

    Returns:
        ``None`` when compatible, else a :class:`LoaderConflict`.
    """
    if not mod.loader_requirements:
        return None

    for requirement in mod.loader_requirements:
        if requirement.loader is not target_loader:
            continue

        if not requirement.version_constraint or not target_version:
            return None

        try:
            constraints = parse_version_constraints(requirement.version_constraint)
        except ResolutionError as exc:
            return LoaderConflict(
                mod_id=mod.id,
                required_loader=requirement.loader,
                target_loader=target_loader,
                required_version=requirement.version_constraint,
                target_version=target_version,
                reason=f"invalid loader version constraint: {exc.message}",
            )

        if constraints.matches_string(target_version):
            return None

        return LoaderConflict(
            mod_id=mod.id,
            required_loader=requirement.loader,
            target_loader=target_loader,
            required_version=requirement.version_constraint,
            target_version=target_version,
            reason=(
                f"mod {mod.id} requires {requirement.loader.value} version "
                f"{requirement.version_constraint}, but {target_version} is installed"
            ),
        )

    supported = ", ".join(req.loader.value for req in mod.loader_requirements)
    return LoaderConflict(
        mod_id=mod.id,
        required_loader=mod.loader_requirements[0].loader,
        target_loader=target_loader,
        target_version=target_version,
        reason=(
            f"mod {mod.id} requires one of [{supported}], "
            f"but {target_loader.value} is being used"
        ),
    )


# ---------------------------------------------------------------------------
# Per-call bookkeeping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Edge:
    """A resolved ``requirer -> mod`` dependency edge."""

    requirer: str
    mod_id: str
    constraint: str
    version: str


@dataclass
class _Findings:
    """Problems and edges gathered below one node.

    Returned alongside the node so that a dropped optional branch takes
    its findings with it.
    """

    incompatibles: List[IncompatiblePair] = field(default_factory=list)
    loader_conflicts: List[LoaderConflict] = field(default_factory=list)
    edges: List[_Edge] = field(default_factory=list)

    def merge(self, other: "_Findings") -> None:
        self.incompatibles.extend(other.incompatibles)
        self.loader_conflicts.extend(other.loader_conflicts)
        self.edges.extend(other.edges)


@dataclass
class _Walk:
    """Traversal state for one :meth:`Resolver.resolve` call."""

    visiting: Set[str] = field(default_factory=set)
    visited: Set[str] = field(default_factory=set)


@dataclass
class _Frame:
    """A node whose dependencies are still being resolved.

    ``pending`` is the dependency whose subtree is currently being built
    above this frame on the stack.
    """

    info: ModInfo
    depth: int
    node: ResolvedDependency
    findings: _Findings
    next_index: int = 0
    pending: Optional[Dependency] = None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class Resolver:
    """Build dependency graphs from provider metadata.

    One instance may serve several :meth:`resolve` calls concurrently;
    traversal state is per call and the shared cache is locked.

    Args:
        provider: Metadata source.
        options: Behaviour switches. Defaults to :class:`ResolutionOptions`.
        cache: Memo to use; a fresh one is created when omitted.
    """

    def __init__(
        self,
        provider: ModInfoProvider,
        options: Optional[ResolutionOptions] = None,
        cache: Optional[ResolutionCache] = None,
    ) -> None:
        if provider is None:
            raise TypeError("provider must not be None; pass a ModInfoProvider")

        self.provider = provider
        self.options = options or ResolutionOptions()
        self.cache = cache if cache is not None else ResolutionCache()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, mod_id: str, version: str) -> DependencyGraph:
        """Resolve the full dependency tree of ``mod_id@version``.

        Raises:
            ResolutionError: The root or a required dependency is missing
                (``NOT_FOUND``), a required dependency closes a cycle
                (``CIRCULAR_DEPENDENCY``), or a required constraint is
                malformed (``INVALID_CONSTRAINT``).
        """
        try:
            root_info = self.provider.get_mod_info(mod_id, version)
        except Exception as exc:
            raise ResolutionError(
                ResolutionErrorType.NOT_FOUND,
                f"failed to get mod info for {mod_id}@{version}: {exc}",
                {"mod": mod_id, "version": version},
            ) from exc

        logger.debug("Resolving %s@%s", mod_id, version)
        root, findings = self._resolve_tree(root_info)

        graph = DependencyGraph(
            root=root,
            all_mods=self._flatten(root),
            conflicts=_version_conflicts(findings.edges),
            incompatibles=findings.incompatibles,
            loader_conflicts=findings.loader_conflicts,
        )
        logger.debug(
            "Resolved %s@%s: %d mods, %d problem(s)",
            mod_id,
            version,
            len(graph.all_mods),
            len(graph.get_errors()),
        )
        return graph

    def find_best_version(self, mod_id: str, constraint: str) -> ModInfo:
        """Pick the release of *mod_id* that best satisfies *constraint*.

        With no constraint the provider's latest release is used.
        Otherwise every release is fetched, filtered by the constraint and
        ordered by the configured strategy; unparseable versions go last.

        Raises:
            ResolutionError: ``INVALID_CONSTRAINT`` for a malformed
                constraint, ``NOT_FOUND`` when the provider fails or
                nothing matches.
        """
        if not constraint or constraint.strip() == WILDCARD:
            return self._ask_provider(mod_id, lambda: self.provider.get_latest_version(mod_id, WILDCARD))

        constraints = parse_version_constraints(constraint)
        releases = self._ask_provider(mod_id, lambda: self.provider.get_all_versions(mod_id))

        matching = [info for info in releases if constraints.matches_string(info.version)]
        if not matching:
            raise ResolutionError(
                ResolutionErrorType.NOT_FOUND,
                f"no version of {mod_id} matches constraint {constraint}",
                {"mod": mod_id, "constraint": constraint},
            )

        return self._order_candidates(matching)[0]

    def clear_cache(self) -> None:
        """Forget every memoized subtree."""
        self.cache.clear()

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _resolve_tree(self, root_info: ModInfo) -> Tuple[ResolvedDependency, _Findings]:
        """Depth-first walk from *root_info* using an explicit frame stack.

        Each node still being expanded is a :class:`_Frame` on ``stack``,
        so the length of a dependency chain is bounded by memory rather
        than by the interpreter's recursion limit.
        """
        walk = _Walk()
        stack: List[_Frame] = []
        done = self._enter(root_info, 0, walk, stack)

        while stack:
            frame = stack[-1]
            if done is not None:
                self._attach(frame, *done)
                done = None

            try:
                dep_info = self._next_dependency(frame, walk)
                if dep_info is None:
                    stack.pop()
                    done = self._finish(frame, walk)
                else:
                    done = self._enter(dep_info, frame.depth + 1, walk, stack)
            except ResolutionError as exc:
                self._unwind(stack, walk, exc)

        assert done is not None
        return done

    def _enter(
        self,
        info: ModInfo,
        depth: int,
        walk: _Walk,
        stack: List[_Frame],
    ) -> Optional[Tuple[ResolvedDependency, _Findings]]:
        """Start on *info*.

        Returns the finished node for a cache hit or a depth-limited leaf.
        Otherwise marks the node visiting, pushes its frame and returns
        ``None``.
        """
        key = info.key

        if key in walk.visiting:
            raise ResolutionError(
                ResolutionErrorType.CIRCULAR_DEPENDENCY,
                f"circular dependency detected: {key}",
                {"mod": info.id, "version": info.version},
            )

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached, _Findings()

        if self.options.max_depth > 0 and depth >= self.options.max_depth:
            return (
                ResolvedDependency(
                    id=info.id,
                    version=info.version,
                    download_url=info.download_url,
                ),
                _Findings(),
            )

        walk.visiting.add(key)
        findings = _Findings()

        if self.options.target_loader is not None:
            loader_conflict = check_loader_compatibility(
                info,
                self.options.target_loader,
                self.options.target_loader_version,
            )
            if loader_conflict is not None:
                findings.loader_conflicts.append(loader_conflict)

        stack.append(
            _Frame(
                info=info,
                depth=depth,
                node=ResolvedDependency(
                    id=info.id,
                    version=info.version,
                    download_url=info.download_url,
                ),
                findings=findings,
            )
        )
        return None

    def _next_dependency(self, frame: _Frame, walk: _Walk) -> Optional[ModInfo]:
        """Advance *frame* to its next dependency that needs resolving.

        Incompatible, skipped and embedded entries are handled in place.
        The chosen dependency is left in ``frame.pending``; ``None`` means
        the frame has no dependencies left.
        """
        info = frame.info
        dependencies = info.dependencies

        while frame.next_index < len(dependencies):
            dep = dependencies[frame.next_index]
            frame.next_index += 1

            if dep.type is DependencyType.INCOMPATIBLE:
                if dep.id in walk.visited:
                    frame.findings.incompatibles.append(
                        IncompatiblePair(
                            mod_a=info.id,
                            mod_b=dep.id,
                            reason=f"{info.id} declares {dep.id} as incompatible",
                        )
                    )
                continue

            optional = dep.type is DependencyType.OPTIONAL
            if optional and not self.options.include_optional:
                continue

            if dep.type is DependencyType.EMBEDDED:
                frame.node.dependencies.append(
                    ResolvedDependency(
                        id=dep.id,
                        version=dep.version_constraint,
                        type=DependencyType.EMBEDDED,
                    )
                )
                continue

            try:
                dep_info = self.find_best_version(dep.id, dep.version_constraint)
            except ResolutionError as exc:
                if optional:
                    logger.debug("Skipping optional %s of %s: %s", dep.id, info.id, exc)
                    continue
                if exc.error_type is ResolutionErrorType.INVALID_CONSTRAINT:
                    raise
                raise ResolutionError(
                    ResolutionErrorType.NOT_FOUND,
                    f"dependency {dep.id} not found: {exc.message}",
                    {"mod": dep.id, "required_by": info.id},
                ) from exc

            frame.pending = dep
            return dep_info

        return None

    def _finish(self, frame: _Frame, walk: _Walk) -> Tuple[ResolvedDependency, _Findings]:
        key = frame.info.key
        walk.visiting.discard(key)
        walk.visited.add(frame.info.id)
        self.cache.set(key, frame.node)
        return frame.node, frame.findings

    @staticmethod
    def _attach(frame: _Frame, child: ResolvedDependency, child_findings: _Findings) -> None:
        """Hang a finished child under the dependency that asked for it."""
        dep = frame.pending
        assert dep is not None
        frame.pending = None

        child.type = dep.type
        child.is_optional = dep.type is DependencyType.OPTIONAL
        frame.node.dependencies.append(child)

        frame.findings.merge(child_findings)
        frame.findings.edges.append(
            _Edge(
                requirer=frame.info.id,
                mod_id=child.id,
                constraint=dep.version_constraint or WILDCARD,
                version=child.version,
            )
        )

    @staticmethod
    def _unwind(stack: List[_Frame], walk: _Walk, exc: ResolutionError) -> None:
        """Pop frames until an optional dependency absorbs *exc*.

        Re-raises *exc* once the stack is empty.
        """
        while stack:
            frame = stack[-1]
            dep = frame.pending
            if dep is not None and dep.type is DependencyType.OPTIONAL:
                logger.warning(
                    "Dropping optional dependency %s of %s: %s", dep.id, frame.info.id, exc
                )
                frame.pending = None
                return

            stack.pop()
            walk.visiting.discard(frame.info.key)

        raise exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ask_provider(self, mod_id: str, call: Callable[[], T]) -> T:
        try:
            return call()
        except ResolutionError:
            raise
        except Exception as exc:
            raise ResolutionError(
                ResolutionErrorType.NOT_FOUND,
                f"provider lookup failed for {mod_id}: {exc}",
                {"mod": mod_id},
            ) from exc

    def _order_candidates(self, candidates: List[ModInfo]) -> List[ModInfo]:
        """Sort releases by strategy, unparseable versions last."""
        parsed: List[Tuple[Version, ModInfo]] = []
        unparsed: List[ModInfo] = []
        for info in candidates:
            try:
                parsed.append((parse_version(info.version), info))
            except ResolutionError:
                unparsed.append(info)

        newest_first = self.options.strategy is ResolutionStrategy.LATEST
        parsed.sort(key=lambda item: item[0], reverse=newest_first)
        return [info for _, info in parsed] + unparsed

    @staticmethod
    def _flatten(root: ResolvedDependency) -> List[ResolvedDependency]:
        """Pre-order list of unique nodes; the first ``id@version`` seen wins."""
        seen: Set[str] = set()
        result: List[ResolvedDependency] = []
        for node in root.walk():
            if node.key in seen:
                continue
            seen.add(node.key)
            result.append(node)
        return result


def _version_conflicts(edges: List[_Edge]) -> List[VersionConflict]:
    """Report every mod that was resolved at more than one version."""
    by_mod: Dict[str, List[_Edge]] = {}
    for edge in edges:
        by_mod.setdefault(edge.mod_id, []).append(edge)

    conflicts: List[VersionConflict] = []
    for mod_id, mod_edges in by_mod.items():
        if len({edge.version for edge in mod_edges}) < 2:
            continue

        required_by: List[str] = []
        constraints: List[str] = []
        seen: Set[Tuple[str, str]] = set()
        for edge in mod_edges:
            if (edge.requirer, edge.constraint) in seen:
                continue
            seen.add((edge.requirer, edge.constraint))
            required_by.append(edge.requirer)
            constraints.append(edge.constraint)

        logger.info("%s resolved to several versions", mod_id)
        conflicts.append(
            VersionConflict(mod_id=mod_id, required_by=required_by, constraints=constraints)
        )
    return conflicts
