"""Static, provider-free validation of a declared dependency list.

Used by ``chunkmc check`` before anything is fetched: it only looks at
the constraint strings themselves.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from chunkmc.exceptions import ResolutionError
from chunkmc.models import (
    Dependency,
    DependencyType,
    ValidationResult,
    ValidationType,
    VersionConstraints,
    is_compatible,
    parse_version_constraints,
)
from chunkmc.utils.logger import get_logger

logger = get_logger("validator")

__all__ = ["validate_dependencies"]


def validate_dependencies(deps: Sequence[Dependency]) -> List[ValidationResult]:
    """Check a flat dependency list for contradictions.

    Two kinds of findings are produced, conflicts first:

    * ``CONFLICT`` when a mod id carries two or more distinct version
      constraints and some pair of them cannot both be satisfied.
    * ``INCOMPATIBLE`` when a mod id is declared incompatible and is also
      required, or depended on with a version constraint.

    A constraint that does not parse is logged and left out of the
    pairwise check; it never fails the pass.

    Args:
        deps: Declared dependencies, e.g. from a manifest.

    Returns:
        Findings in first-seen mod order. Empty when nothing is wrong.
    """
    requirements: Dict[str, List[str]] = {}
    depended_on: Dict[str, None] = {}
    blocked: Dict[str, List[str]] = {}

    for dep in deps:
        if dep.type is DependencyType.INCOMPATIBLE:
            blocked.setdefault(dep.id, []).append("root")
            continue

        # An unconstrained optional or embedded entry is not a requirement.
        if dep.type is DependencyType.REQUIRED or dep.version_constraint:
            depended_on.setdefault(dep.id, None)
        if dep.version_constraint:
            constraints = requirements.setdefault(dep.id, [])
            if dep.version_constraint not in constraints:
                constraints.append(dep.version_constraint)

    results: List[ValidationResult] = []

    for mod_id, constraints in requirements.items():
        if len(constraints) < 2:
            continue
        if not _all_compatible(mod_id, constraints):
            results.append(
                ValidationResult(
                    type=ValidationType.CONFLICT,
                    mod_id=mod_id,
                    message=f"conflicting version constraints: {', '.join(constraints)}",
                )
            )

    for mod_id in depended_on:
        blockers = blocked.get(mod_id)
        if blockers:
            results.append(
                ValidationResult(
                    type=ValidationType.INCOMPATIBLE,
                    mod_id=mod_id,
                    message=f"incompatible with: {', '.join(blockers)}",
                )
            )

    return results


def _parse_or_skip(mod_id: str, raw: str) -> Optional[VersionConstraints]:
    try:
        return parse_version_constraints(raw)
    except ResolutionError as exc:
        logger.warning("Ignoring malformed constraint %r for %s: %s", raw, mod_id, exc.message)
        return None


def _all_compatible(mod_id: str, constraints: List[str]) -> bool:
    parsed = [_parse_or_skip(mod_id, raw) for raw in constraints]
    usable = [item for item in parsed if item is not None]

    for i, first in enumerate(usable):
        for second in usable[i + 1 :]:
            if not is_compatible(first, second):
                return False
    return True
