"""Semantic Versioning 2.0.0 parsing, precedence and the publish gate."""

import re
from functools import total_ordering

from pydantic import BaseModel

from ams.errors import ErrorKind

# Official SemVer 2.0.0 grammar
SEMVER_PATTERN = re.compile(
    r"^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(?:-((?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?\Z"
)


@total_ordering
class SemVer:
    """A parsed semantic version. Build metadata does not affect precedence."""

    __slots__ = ("major", "minor", "patch", "prerelease", "build", "_raw")

    def __init__(
        self,
        major: int,
        minor: int,
        patch: int,
        prerelease: tuple[str, ...] = (),
        build: str | None = None,
        raw: str | None = None,
    ) -> None:
        self.major = major
        self.minor = minor
        self.patch = patch
        self.prerelease = prerelease
        self.build = build
        self._raw = raw

    @classmethod
    def parse(cls, value: str) -> "SemVer | None":
        """Parse a version string, returning None when it is not valid SemVer."""
        match = SEMVER_PATTERN.match(value.strip()) if isinstance(value, str) else None
        if match is None:
            return None
        major, minor, patch, prerelease, build = match.groups()
        return cls(
            int(major),
            int(minor),
            int(patch),
            tuple(prerelease.split(".")) if prerelease else (),
            build,
            raw=value,
        )

    def _key(self) -> tuple:
        # A release sorts above every pre-release of the same core version
        if not self.prerelease:
            pre: tuple = ((1,),)
        else:
            pre = tuple(
                (0, int(ident), "") if ident.isdigit() else (1, 0, ident)
                for ident in self.prerelease
            )
            pre = ((0,), *pre)
        return (self.major, self.minor, self.patch, pre)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "SemVer") -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        if self._raw is not None:
            return self._raw
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text

    def __repr__(self) -> str:
        return f"SemVer({str(self)!r})"


def is_valid(value: str) -> bool:
    return SemVer.parse(value) is not None


def max_version(versions: list[str]) -> SemVer | None:
    """Highest valid version in ``versions``; invalid entries are skipped."""
    parsed = [v for v in (SemVer.parse(raw) for raw in versions) if v is not None]
    return max(parsed) if parsed else None


class SemverAssessment(BaseModel):
    """Outcome of the publish gate."""

    allowed: bool
    kind: ErrorKind | None = None
    reason: str | None = None


def assess(proposed: str, existing_versions: list[str]) -> SemverAssessment:
    """Decide whether ``proposed`` may be published next to ``existing_versions``.

    Rules, in order: invalid syntax is rejected; an exact duplicate is
    rejected; anything below the highest valid existing version is
    rejected as regressive. Corrupt existing entries are ignored so legacy
    data can never block a publish.
    """
    candidate = SemVer.parse(proposed)
    if candidate is None:
        return SemverAssessment(
            allowed=False,
            kind=ErrorKind.VALIDATION_ERROR,
            reason=f"Version {proposed} is not valid SemVer",
        )

    if proposed in existing_versions:
        return SemverAssessment(
            allowed=False,
            kind=ErrorKind.DUPLICATE_VERSION,
            reason=f"Version {proposed} already published",
        )

    latest = max_version(existing_versions)
    if latest is not None and candidate < latest:
        return SemverAssessment(
            allowed=False,
            kind=ErrorKind.REGRESSIVE_VERSION,
            reason=f"Version {proposed} is lower than latest {latest}",
        )

    return SemverAssessment(allowed=True)
