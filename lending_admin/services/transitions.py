from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping

from lending_admin.core.settings import settings
from lending_admin.schemas.audit import TargetType
from lending_admin.schemas.loan import LoanStatus
from lending_admin.schemas.profile import ActivationStatus
from lending_admin.schemas.withdrawal import WithdrawalStatus

TransitionMode = Literal["strict", "override"]

LOAN_TRANSITIONS: dict[str, frozenset[str]] = {
    LoanStatus.PENDING_APPROVAL.value: frozenset({LoanStatus.APPROVED.value, LoanStatus.REJECTED.value}),
    LoanStatus.APPROVED.value: frozenset({LoanStatus.IN_REPAYMENT.value, LoanStatus.REJECTED.value}),
    LoanStatus.IN_REPAYMENT.value: frozenset({LoanStatus.COMPLETED.value}),
    LoanStatus.REJECTED.value: frozenset({LoanStatus.PENDING_APPROVAL.value}),
    LoanStatus.COMPLETED.value: frozenset(),
}

WITHDRAWAL_TRANSITIONS: dict[str, frozenset[str]] = {
    WithdrawalStatus.PENDING.value: frozenset(
        {WithdrawalStatus.REVIEW.value, WithdrawalStatus.APPROVED.value, WithdrawalStatus.REJECTED.value}
    ),
    WithdrawalStatus.REVIEW.value: frozenset(
        {WithdrawalStatus.APPROVED.value, WithdrawalStatus.REJECTED.value, WithdrawalStatus.PENDING.value}
    ),
    WithdrawalStatus.APPROVED.value: frozenset(),
    WithdrawalStatus.REJECTED.value: frozenset(),
}

PROFILE_TRANSITIONS: dict[str, frozenset[str]] = {
    ActivationStatus.PENDING.value: frozenset(
        {ActivationStatus.IN_PROGRESS.value, ActivationStatus.COMPLETED.value, ActivationStatus.REJECTED.value}
    ),
    ActivationStatus.IN_PROGRESS.value: frozenset(
        {ActivationStatus.COMPLETED.value, ActivationStatus.REJECTED.value, ActivationStatus.PENDING.value}
    ),
    ActivationStatus.COMPLETED.value: frozenset({ActivationStatus.REJECTED.value}),
    ActivationStatus.REJECTED.value: frozenset({ActivationStatus.PENDING.value, ActivationStatus.IN_PROGRESS.value}),
}


@dataclass(frozen=True)
class TransitionPolicy:
    """Allowed status edges per entity type.

    ``override`` mode lets admins move a record to any other valid status.
    """

    mode: TransitionMode = "strict"
    tables: Mapping[str, Mapping[str, frozenset[str]]] = field(
        default_factory=lambda: {
            TargetType.LOAN.value: LOAN_TRANSITIONS,
            TargetType.WITHDRAWAL.value: WITHDRAWAL_TRANSITIONS,
            TargetType.USER_PROFILE.value: PROFILE_TRANSITIONS,
        }
    )

    def allowed_targets(self, target_type: str, current: str) -> frozenset[str]:
        return self.tables.get(target_type, {}).get(current, frozenset())

    def is_allowed(self, target_type: str, current: str, proposed: str) -> bool:
        if current == proposed:
            return False
        if self.mode == "override":
            return proposed in self.tables.get(target_type, {})
        return proposed in self.allowed_targets(target_type, current)

    def check(self, target_type: str, current: str, proposed: str) -> list[str]:
        if self.is_allowed(target_type, current, proposed):
            return []
        return [f"Status cannot change from {current} to {proposed}"]


def build_policy(mode: str | None = None) -> TransitionPolicy:
    return TransitionPolicy(mode=mode or settings.status_transition_mode)
