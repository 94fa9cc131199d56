# apkaudit — Android Package Risk Auditor
# Copyright (C) 2026 apkaudit Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Pydantic models for criticality tiers and findings."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator, Optional

from pydantic import BaseModel, ConfigDict


class Criticality(str, Enum):
    """Ordered severity tier: warning < low < medium < high < critical."""

    WARNING = "warning"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> Criticality:
        """Parse the canonical textual form (case-insensitive).

        Raises:
            ValueError: if the text does not name a criticality.
        """
        if not isinstance(text, str):
            raise ValueError(f"Criticality must be a string, got {type(text).__name__}")
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise ValueError(
                f"Criticality must be one of {', '.join(c.value for c in cls)}; got {text!r}"
            ) from None

    @property
    def rank(self) -> int:
        return _RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Criticality):
            return NotImplemented
        return self.rank >= other.rank


_RANK: dict[Criticality, int] = {c: i for i, c in enumerate(Criticality)}


class Finding(BaseModel):
    """A single detected issue.

    Findings are immutable and hashable. Two findings are the same finding
    when every field matches; inside a criticality tier they are ordered by
    ``identity``, so iteration order never depends on discovery order.
    """

    model_config = ConfigDict(frozen=True)

    criticality: Criticality
    name: str
    description: str = ""
    file: Optional[str] = None
    line: Optional[int] = None
    end_line: Optional[int] = None
    code: Optional[str] = None

    @property
    def identity(self) -> tuple[str, str, int, int, str, str]:
        """Sort key within a tier. Missing locations sort first."""
        return (
            self.name,
            self.file or "",
            self.line if self.line is not None else -1,
            self.end_line if self.end_line is not None else -1,
            self.description,
            self.code or "",
        )


class FindingSet:
    """Deduplicating set of findings iterated in ``Finding.identity`` order."""

    def __init__(self, findings: Iterable[Finding] = ()) -> None:
        self._items: set[Finding] = set()
        for finding in findings:
            self.add(finding)

    def add(self, finding: Finding) -> bool:
        """Insert a finding. Returns False if an equal finding was already present."""
        if finding in self._items:
            return False
        self._items.add(finding)
        return True

    def __iter__(self) -> Iterator[Finding]:
        return iter(sorted(self._items, key=lambda f: f.identity))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, finding: object) -> bool:
        return finding in self._items

    def __repr__(self) -> str:
        return f"FindingSet({len(self._items)} findings)"
