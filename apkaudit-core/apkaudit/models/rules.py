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

"""Pydantic models for permission rules and the rule table."""

from __future__ import annotations

from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict

from apkaudit.models.findings import Criticality
from apkaudit.models.permissions import Permission

DEFAULT_UNKNOWN_DESCRIPTION = (
    "Even if the application can create its own permissions, it's discouraged, "
    "since it can lead to misunderstanding between developers."
)


class PermissionRule(BaseModel):
    """Classification of one cataloged permission."""

    model_config = ConfigDict(frozen=True)

    permission: Permission
    criticality: Criticality
    label: str
    description: str


class UnknownPermissionDefault(BaseModel):
    """Fallback classification for permissions outside the catalog."""

    model_config = ConfigDict(frozen=True)

    criticality: Criticality = Criticality.LOW
    description: str = DEFAULT_UNKNOWN_DESCRIPTION


class RuleTable:
    """Permission -> rule mapping.

    Keyed by permission identity only: the first rule inserted for a
    permission is kept and later rules for the same permission are dropped,
    whatever their criticality, label or description. Iteration follows
    catalog order.
    """

    def __init__(self) -> None:
        self._rules: dict[Permission, PermissionRule] = {}

    def insert(self, rule: PermissionRule) -> bool:
        """Insert a rule. Returns False if the permission already had one."""
        if rule.permission in self._rules:
            return False
        self._rules[rule.permission] = rule
        return True

    def get(self, permission: Permission) -> Optional[PermissionRule]:
        return self._rules.get(permission)

    def __contains__(self, permission: object) -> bool:
        return permission in self._rules

    def __iter__(self) -> Iterator[PermissionRule]:
        for permission in sorted(self._rules):
            yield self._rules[permission]

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleTable):
            return NotImplemented
        return self._rules == other._rules

    def __repr__(self) -> str:
        return f"RuleTable({len(self._rules)} rules)"
