"""Semver parsing and chart version constraint matching.

Constraints follow the syntax helm accepts in ``Chart.yaml`` dependency
``version`` fields and ``--version`` flags: comparison operators
(``=``, ``!=``, ``>``, ``>=``, ``<``, ``<=``), tilde and caret ranges,
``x``/``*`` wildcards, hyphen ranges (``1.2 - 1.4``), comma or space
separated AND groups and ``||`` separated OR groups.
"""

from __future__ import annotations

import functools
import re
from typing import Callable, Iterable

_VERSION_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


def _identifier_key(ident: str) -> tuple[int, int, str]:
    # Numeric identifiers sort below alphanumeric ones
    if ident.isdigit():
        return (0, int(ident), "")
    return (1, 0, ident)


@functools.total_ordering
class SemVer:
    """A semantic version ordered by semver precedence; build metadata is ignored."""

    __slots__ = ("major", "minor", "patch", "prerelease", "build")

    def __init__(self, major: int, minor: int = 0, patch: int = 0, prerelease: str = "", build: str = ""):
        self.major = major
        self.minor = minor
        self.patch = patch
        self.prerelease = prerelease
        self.build = build

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _key(self) -> tuple:
        release = (self.major, self.minor, self.patch)
        if not self.prerelease:
            return (release, 1, ())
        return (release, 0, tuple(_identifier_key(i) for i in self.prerelease.split(".")))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: SemVer) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text

    def __repr__(self) -> str:
        return f"SemVer({str(self)!r})"


def parse_version(v: str) -> SemVer | None:
    """Parse a semver string (leading ``v`` and missing minor/patch allowed), None on failure."""
    m = _VERSION_RE.match(v.strip())
    if m is None:
        return None
    return SemVer(
        int(m.group("major")),
        int(m.group("minor") or 0),
        int(m.group("patch") or 0),
        m.group("pre") or "",
        m.group("build") or "",
    )


_OP_SPACE_RE = re.compile(r"(\^|~>?|>=|=>|<=|=<|!=|>|<|=)\s+")
_TERM_RE = re.compile(
    r"^(?P<op>\^|~>?|>=|=>|<=|=<|!=|>|<|=)?v?"
    r"(?P<major>\d+|[xX*])(?:\.(?P<minor>\d+|[xX*]))?(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?(?:\+[0-9A-Za-z.-]+)?$"
)
_WILDCARDS = ("x", "X", "*")

Predicate = Callable[[SemVer], bool]


class InvalidConstraintError(ValueError):
    pass


def _part(raw: str | None) -> int | None:
    if raw is None or raw in _WILDCARDS:
        return None
    return int(raw)


def _term(text: str) -> Predicate:
    if text in _WILDCARDS:
        return lambda v: True
    m = _TERM_RE.match(text)
    if m is None:
        raise InvalidConstraintError(f"improper constraint: {text}")
    op = m.group("op") or "="
    major, minor, patch = _part(m.group("major")), _part(m.group("minor")), _part(m.group("patch"))
    pre = m.group("pre") or ""
    if major is None:
        # "*", "x.x" and friends
        if op in ("<", "!="):
            return lambda v: False
        return lambda v: True
    if minor is None:
        patch = None

    lower = SemVer(major, minor or 0, patch or 0, pre)
    exact = minor is not None and patch is not None
    if minor is None:
        upper = SemVer(major + 1, 0, 0)
    elif patch is None:
        upper = SemVer(major, minor + 1, 0)
    else:
        upper = SemVer(major, minor, patch + 1)

    if op == "=":
        if exact:
            return lambda v: v == lower
        return lambda v: lower <= v < upper
    if op == "!=":
        if exact:
            return lambda v: v != lower
        return lambda v: not (lower <= v < upper)
    if op == ">":
        if exact:
            return lambda v: v > lower
        return lambda v: v >= upper
    if op in (">=", "=>"):
        return lambda v: v >= lower
    if op == "<":
        return lambda v: v < lower
    if op in ("<=", "=<"):
        if exact:
            return lambda v: v <= lower
        return lambda v: v < upper
    if op in ("~", "~>"):
        if minor is None:
            tilde_upper = SemVer(major + 1, 0, 0)
        else:
            tilde_upper = SemVer(major, minor + 1, 0)
        return lambda v: lower <= v < tilde_upper
    # caret
    if major > 0 or minor is None:
        caret_upper = SemVer(major + 1, 0, 0)
    elif minor > 0 or patch is None:
        caret_upper = SemVer(0, minor + 1, 0)
    else:
        caret_upper = SemVer(0, 0, patch + 1)
    return lambda v: lower <= v < caret_upper


def _hyphen_range(low: str, high: str) -> list[Predicate]:
    return [_term(">=" + low.strip()), _term("<=" + high.strip())]


def _and_group(text: str) -> list[Predicate]:
    if " - " in text:
        low, high = text.split(" - ", 1)
        return _hyphen_range(low, high)
    normalized = _OP_SPACE_RE.sub(r"\1", text)
    terms = [t for t in re.split(r"[,\s]+", normalized) if t]
    return [_term(t) for t in terms]


def parse_constraint(constraint: str) -> list[list[Predicate]]:
    """Parse a constraint into OR-of-AND predicate groups.

    Raises InvalidConstraintError on malformed input.
    """
    groups = []
    for raw in constraint.split("||"):
        raw = raw.strip()
        if not raw:
            continue
        groups.append(_and_group(raw))
    return groups


def satisfies(version: str, constraint: str) -> bool:
    """Return True if ``version`` matches ``constraint``.

    An empty constraint matches any release version. Pre-releases only match
    when the constraint itself names a pre-release.
    """
    v = parse_version(version)
    if v is None:
        return False
    constraint = constraint.strip()
    if not constraint:
        return not v.is_prerelease
    if v.is_prerelease and "-" not in constraint.replace(" - ", ""):
        return False
    try:
        groups = parse_constraint(constraint)
    except InvalidConstraintError:
        return False
    return any(all(pred(v) for pred in group) for group in groups)


def highest_satisfying(versions: Iterable[str], constraint: str) -> str | None:
    """Pick the highest version string that satisfies the constraint."""
    best: tuple[SemVer, str] | None = None
    for raw in versions:
        if not satisfies(raw, constraint):
            continue
        parsed = parse_version(raw)
        if parsed is None:
            continue
        if best is None or parsed > best[0]:
            best = (parsed, raw)
    return best[1] if best else None
