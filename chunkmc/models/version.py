"""
Version and constraint models for chunkmc.

Mod versions in the wild are only loosely semantic: ``1.2.3``, ``v1.2``,
``5`` and ``1.20.1-beta.2+build.7`` all show up in metadata. This module
parses them leniently into :class:`Version` objects and evaluates
constraint expressions against them.

Constraint grammar (one token)::

    [op]version      op is one of  >= <= > < = ~ ^  (default "=")
    *                matches anything ("" behaves the same)

A :class:`VersionConstraints` set is several space-separated tokens
combined with AND semantics. There is no OR operator.

Example::

    >>> vc = parse_version_constraints(">=1.2.0 <2.0.0")
    >>> vc.matches(parse_version("1.9.9"))
    True
    >>> vc.matches_string("2.0.0")
    False
"""

from __future__ import annotations

import re
import functools
from enum import Enum
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set, Tuple

from chunkmc.constants import WILDCARD
from chunkmc.exceptions import ResolutionError, ResolutionErrorType

__all__ = [
    "Version",
    "Operator",
    "Constraint",
    "VersionConstraints",
    "parse_version",
    "compare",
    "parse_constraint",
    "parse_version_constraints",
    "is_compatible",
]

_NUMERIC = re.compile(r"^[0-9]+$")

# Longest operators first so ">=" is not read as ">" followed by "=1.0".
_CONSTRAINT_PATTERN = re.compile(r"^(>=|<=|>|<|=|~|\^)?(.+)$")


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A parsed, comparable mod version.

    Build metadata is kept for display but never takes part in ordering
    or equality.

    Attributes:
        major: Major component.
        minor: Minor component (0 when absent from the input).
        patch: Patch component (0 when absent from the input).
        prerelease: Text after ``-`` (without the dash), or ``""``.
        build: Text after ``+`` (without the plus), or ``""``.
        raw: Input string with any leading ``v`` removed.
    """

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: str = ""
    build: str = ""
    raw: str = ""

    def compare(self, other: "Version") -> int:
        """Return -1, 0 or 1 as this version sorts before, equal to, or after *other*."""
        mine = (self.major, self.minor, self.patch)
        theirs = (other.major, other.minor, other.patch)
        if mine != theirs:
            return -1 if mine < theirs else 1

        # A release outranks any prerelease of the same core version
        if not self.prerelease and other.prerelease:
            return 1
        if self.prerelease and not other.prerelease:
            return -1
        if self.prerelease < other.prerelease:
            return -1
        if self.prerelease > other.prerelease:
            return 1
        return 0

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"Version({self.raw!r})"


def parse_version(value: str) -> Version:
    """Parse a version string leniently.

    A leading ``v`` is stripped, then ``+build`` and ``-prerelease``
    suffixes are split off (build first, since it is outermost). The rest
    is split on ``.``; missing minor/patch components default to ``0`` and
    components beyond the third are ignored.

    Args:
        value: Version string such as ``"v1.2.3-beta.1+build.5"``.

    Returns:
        The parsed :class:`Version`.

    Raises:
        ResolutionError: ``INVALID_CONSTRAINT`` when the string is empty or
            a numeric component is not a non-negative integer.

    Example::

        >>> v = parse_version("v1.2-rc.1")
        >>> (v.major, v.minor, v.patch, v.prerelease, v.raw)
        (1, 2, 0, 'rc.1', '1.2-rc.1')
    """
    if not value:
        raise ResolutionError(
            ResolutionErrorType.INVALID_CONSTRAINT, "empty version string"
        )

    normalized = value[1:] if value.startswith("v") else value
    remainder = normalized

    build = ""
    if "+" in remainder:
        remainder, build = remainder.split("+", 1)

    prerelease = ""
    if "-" in remainder:
        remainder, prerelease = remainder.split("-", 1)

    parts = remainder.split(".")
    numbers: List[int] = []
    for label, part in zip(("major", "minor", "patch"), parts):
        if not _NUMERIC.match(part):
            raise ResolutionError(
                ResolutionErrorType.INVALID_CONSTRAINT,
                f"invalid {label} version: {part!r}",
                {"version": value},
            )
        numbers.append(int(part))

    while len(numbers) < 3:
        numbers.append(0)

    return Version(
        major=numbers[0],
        minor=numbers[1],
        patch=numbers[2],
        prerelease=prerelease,
        build=build,
        raw=normalized,
    )


def compare(a: Version, b: Version) -> int:
    """Module-level form of :meth:`Version.compare`."""
    return a.compare(b)


# ---------------------------------------------------------------------------
# Single constraints
# ---------------------------------------------------------------------------


class Operator(Enum):
    """Constraint operators."""

    EQ = "="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    TILDE = "~"
    CARET = "^"
    ANY = "*"


@dataclass(frozen=True)
class Constraint:
    """A single version predicate such as ``>=1.2.0`` or ``^2.1``.

    Attributes:
        op: Comparison operator.
        version: Operand; ``None`` only for the wildcard.
        raw: Source text of this token.
    """

    op: Operator
    version: Optional[Version] = None
    raw: str = ""

    @property
    def is_wildcard(self) -> bool:
        return self.op is Operator.ANY

    def matches(self, version: Version) -> bool:
        """Return True if *version* satisfies this constraint."""
        if self.op is Operator.ANY or self.version is None:
            return True

        target = self.version
        cmp = version.compare(target)

        if self.op is Operator.EQ:
            return cmp == 0
        if self.op is Operator.GT:
            return cmp > 0
        if self.op is Operator.GE:
            return cmp >= 0
        if self.op is Operator.LT:
            return cmp < 0
        if self.op is Operator.LE:
            return cmp <= 0
        if self.op is Operator.TILDE:
            return (
                version.major == target.major
                and version.minor == target.minor
                and cmp >= 0
            )
        if self.op is Operator.CARET:
            # ^0.x.y only allows patch-level movement, like ~
            if target.major == 0:
                return (
                    version.major == 0
                    and version.minor == target.minor
                    and cmp >= 0
                )
            return version.major == target.major and cmp >= 0
        return False

    def __str__(self) -> str:
        return self.raw or self.op.value


def parse_constraint(value: str) -> Constraint:
    """Parse one constraint token.

    Args:
        value: Token such as ``">=1.2.0"``, ``"~1.4"``, ``"1.0.0"`` or ``"*"``.

    Returns:
        The parsed :class:`Constraint`. Un-prefixed versions imply ``=``.

    Raises:
        ResolutionError: ``INVALID_CONSTRAINT`` if the version part is invalid.
    """
    token = value.strip()
    if token in ("", WILDCARD):
        return Constraint(op=Operator.ANY, raw=token)

    match = _CONSTRAINT_PATTERN.match(token)
    if match is None:
        raise ResolutionError(
            ResolutionErrorType.INVALID_CONSTRAINT,
            f"invalid constraint format: {token}",
        )

    op_text, version_text = match.groups()
    return Constraint(
        op=Operator(op_text or "="),
        version=parse_version(version_text),
        raw=token,
    )


# ---------------------------------------------------------------------------
# Constraint sets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VersionConstraints:
    """An AND-combined, ordered set of constraints.

    Attributes:
        constraints: Constituent constraints in source order.
        raw: Source text (space separated).
    """

    constraints: Tuple[Constraint, ...]
    raw: str = ""

    def matches(self, version: Version) -> bool:
        """Return True only if every constraint accepts *version*."""
        return all(c.matches(version) for c in self.constraints)

    def matches_string(self, version: str) -> bool:
        """Like :meth:`matches` but parses *version* first; False if it is invalid."""
        try:
            parsed = parse_version(version)
        except ResolutionError:
            return False
        return self.matches(parsed)

    def intersect(self, other: "VersionConstraints") -> "VersionConstraints":
        """Combine two sets, dropping tokens whose raw text was already seen."""
        seen: Set[str] = set()
        combined: List[Constraint] = []
        for constraint in (*self.constraints, *other.constraints):
            if constraint.raw in seen:
                continue
            seen.add(constraint.raw)
            combined.append(constraint)

        raw = " ".join(part for part in (self.raw, other.raw) if part)
        return VersionConstraints(tuple(combined), raw)

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self.constraints)

    def __len__(self) -> int:
        return len(self.constraints)

    def __str__(self) -> str:
        return self.raw


def parse_version_constraints(value: str) -> VersionConstraints:
    """Parse a whitespace-separated constraint expression.

    Raises:
        ResolutionError: ``INVALID_CONSTRAINT`` if any token is invalid.
    """
    text = value.strip()
    if text in ("", WILDCARD):
        return VersionConstraints((Constraint(op=Operator.ANY, raw=WILDCARD),), text)

    return VersionConstraints(
        tuple(parse_constraint(part) for part in text.split()),
        text,
    )


def is_compatible(first: VersionConstraints, second: VersionConstraints) -> bool:
    """Heuristically decide whether two constraint sets can hold together.

    The ``>``/``>=``/``<``/``<=`` tokens of both sets are folded into one
    ``[min, max]`` interval, tracking whether each bound is strict. Each
    ``=`` token is checked directly against every other token. ``~`` and
    ``^`` only take part through those ``=`` checks.

    This is an interval-overlap approximation, not a satisfiability test.

    Returns:
        False when an ``=`` token is rejected by another token, when
        ``min > max``, or when ``min == max`` with a strict bound.
    """
    combined = first.intersect(second)

    lower: Optional[Version] = None
    upper: Optional[Version] = None
    lower_strict = False
    upper_strict = False

    for constraint in combined.constraints:
        bound = constraint.version
        if constraint.op is Operator.ANY or bound is None:
            continue

        if constraint.op is Operator.GT:
            if lower is None or bound > lower or (bound == lower and not lower_strict):
                lower, lower_strict = bound, True
        elif constraint.op is Operator.GE:
            if lower is None or bound > lower:
                lower, lower_strict = bound, False
        elif constraint.op is Operator.LT:
            if upper is None or bound < upper or (bound == upper and not upper_strict):
                upper, upper_strict = bound, True
        elif constraint.op is Operator.LE:
            if upper is None or bound < upper:
                upper, upper_strict = bound, False
        elif constraint.op is Operator.EQ:
            for other in combined.constraints:
                if other is not constraint and not other.matches(bound):
                    return False

    if lower is not None and upper is not None:
        cmp = lower.compare(upper)
        if cmp > 0:
            return False
        if cmp == 0 and (lower_strict or upper_strict):
            return False

    return True
