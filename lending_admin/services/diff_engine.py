from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping


class ChangeKind(str, Enum):
    STATUS_CHANGED = "status_changed"
    DETAILS_MODIFIED = "details_modified"
    PROFILE_UPDATED = "profile_updated"
    NO_OP = "no_op"


PROFILE_TARGET_TYPES = frozenset({"user_profile"})


@dataclass(frozen=True)
class MutationClassification:
    """What a mutation did, as seen by the audit trail and the end user."""

    kind: ChangeKind
    target_type: str
    target_id: str | None = None
    old_status: str | None = None
    new_status: str | None = None
    changed_fields: tuple[str, ...] = ()
    changes: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def is_no_op(self) -> bool:
        return self.kind is ChangeKind.NO_OP


def _field_changes(
    before: Mapping[str, Any], after: Mapping[str, Any], fields: Iterable[str]
) -> dict[str, dict[str, Any]]:
    changes: dict[str, dict[str, Any]] = {}
    for name in fields:
        old, new = before.get(name), after.get(name)
        if old != new:
            changes[name] = {"from": old, "to": new}
    return changes


def classify(
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    *,
    target_type: str,
    tracked_fields: Iterable[str],
    status_field: str | None = "status",
    target_id: str | None = None,
) -> MutationClassification:
    tracked = tuple(tracked_fields)

    if target_type in PROFILE_TARGET_TYPES:
        fields = tracked + ((status_field,) if status_field and status_field not in tracked else ())
        changes = _field_changes(before, after, fields)
        if not changes:
            return MutationClassification(ChangeKind.NO_OP, target_type, target_id)
        return MutationClassification(
            ChangeKind.PROFILE_UPDATED,
            target_type,
            target_id,
            old_status=before.get(status_field) if status_field else None,
            new_status=after.get(status_field) if status_field else None,
            changed_fields=tuple(changes),
            changes=changes,
        )

    old_status = before.get(status_field) if status_field else None
    new_status = after.get(status_field) if status_field else None
    details = _field_changes(before, after, tracked)
    if status_field and old_status != new_status:
        changes = {status_field: {"from": old_status, "to": new_status}, **details}
        return MutationClassification(
            ChangeKind.STATUS_CHANGED,
            target_type,
            target_id,
            old_status=old_status,
            new_status=new_status,
            changed_fields=tuple(changes),
            changes=changes,
        )
    if details:
        return MutationClassification(
            ChangeKind.DETAILS_MODIFIED,
            target_type,
            target_id,
            old_status=old_status,
            new_status=new_status,
            changed_fields=tuple(details),
            changes=details,
        )
    return MutationClassification(
        ChangeKind.NO_OP, target_type, target_id, old_status=old_status, new_status=new_status
    )
