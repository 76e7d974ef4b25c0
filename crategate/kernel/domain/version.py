"""Semantic version parsing and precedence.

Cargo requires every package version to be a semver 2.0.0 string:
``MAJOR.MINOR.PATCH`` with an optional ``-pre.release`` tag and optional
``+build`` metadata. Build metadata is kept for display but ignored for
precedence and equality, as semver 2.0.0 (and crates.io) require.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class Version:
    """An immutable semantic version.

    Examples
    --------
    >>> Version.parse("1.2.0-beta.1") < Version.parse("1.2.0")
    True
    >>> str(Version.parse("0.3.1+build.5"))
    '0.3.1+build.5'
    """

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = field(default=())

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a semver string.

        Raises
        ------
        ValueError
            If ``text`` is not a valid semantic version
        """
        match = _SEMVER_RE.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid semantic version: {text!r}")
        major, minor, patch, pre, build = match.groups()
        return cls(
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            pre=tuple(pre.split(".")) if pre else (),
            build=tuple(build.split(".")) if build else (),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre)

    def _precedence_key(self) -> tuple:
        # A release sorts after every pre-release of the same triple
        if not self.pre:
            pre_key: tuple = ((1,),)
        else:
            pre_key = tuple(
                (0, 0, int(part), "") if part.isdigit() else (0, 1, 0, part) for part in self.pre
            )
        return (self.major, self.minor, self.patch, pre_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text
