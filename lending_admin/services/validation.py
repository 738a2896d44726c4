"""Business-rule checks for admin mutation requests.

Every check appends to a shared error list so a caller sees all problems in
one response. Structural checks run before the target row is loaded; the
``*_against_current`` helpers run once the row is locked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from pydantic import BaseModel

from lending_admin.schemas.loan import LoanStatus
from lending_admin.schemas.profile import ActivationStatus
from lending_admin.schemas.withdrawal import WithdrawalStatus
from lending_admin.services.authz import ActorIdentity
from lending_admin.services.calculator import round_money
from lending_admin.services.transitions import TransitionPolicy

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
MAX_AMOUNT = Decimal("1000000")
MIN_RATE = Decimal("0")
MAX_RATE = Decimal("50")
MIN_DURATION_MONTHS = 1
MAX_DURATION_MONTHS = 360
MIN_AGE_YEARS = 18

# Request keys that describe the mutation itself rather than a field of the record
CONTROL_FIELDS = frozenset({"reason", "admin_id", "expected_version", "status_change"})


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def extend(self, errors: Iterable[str]) -> "ValidationResult":
        self.errors.extend(errors)
        return self


def validate_reason(reason: str | None) -> list[str]:
    if reason is None or not reason.strip():
        return ["Reason for modification is required"]
    length = len(reason.strip())
    if length < REASON_MIN_LENGTH:
        return [f"Reason must be at least {REASON_MIN_LENGTH} characters"]
    if length > REASON_MAX_LENGTH:
        return [f"Reason must be at most {REASON_MAX_LENGTH} characters"]
    return []


def validate_admin_reference(
    admin_id: str | None, actor: ActorIdentity | None, *, required: bool
) -> list[str]:
    if not admin_id:
        return ["Admin ID is required"] if required else []
    if actor is not None and str(admin_id) != actor.actor_id:
        return ["Admin ID does not match the authenticated administrator"]
    return []


def _finite(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _check_amount(value: Any, label: str) -> list[str]:
    if value is None:
        return []
    amount = _finite(value)
    if amount is None:
        return [f"{label} must be a finite number"]
    # bounds apply to the stored cents value
    amount = round_money(amount)
    if amount <= 0:
        return [f"{label} must be positive"]
    if amount > MAX_AMOUNT:
        return [f"{label} must not exceed {MAX_AMOUNT}"]
    return []


def _check_rate(value: Any) -> list[str]:
    if value is None:
        return []
    rate = _finite(value)
    if rate is None:
        return ["Interest rate must be a finite number"]
    if rate < MIN_RATE or rate > MAX_RATE:
        return [f"Interest rate must be between {MIN_RATE} and {MAX_RATE}"]
    return []


def _check_duration(value: Any) -> list[str]:
    if value is None:
        return []
    months = _finite(value)
    if months is None or months != months.to_integral_value():
        return ["Duration must be a whole number of months"]
    if months < MIN_DURATION_MONTHS or months > MAX_DURATION_MONTHS:
        return [f"Duration must be between {MIN_DURATION_MONTHS} and {MAX_DURATION_MONTHS} months"]
    return []


def _check_status_value(value: str | None, allowed: Iterable[str]) -> list[str]:
    if value is None:
        return []
    if not value.strip():
        return ["Status must not be empty"]
    if value not in set(allowed):
        return [f"Invalid status: {value}"]
    return []


def supplied_fields(request: BaseModel) -> set[str]:
    """Record fields the caller actually sent, ignoring control keys."""
    return set(request.model_fields_set) - CONTROL_FIELDS


def explicit_status_change(request: BaseModel, status_attr: str) -> bool:
    if getattr(request, "status_change", False):
        return True
    return supplied_fields(request) == {status_attr}


def status_against_current(
    *,
    target_type: str,
    current: str,
    proposed: str | None,
    explicit: bool,
    policy: TransitionPolicy,
) -> list[str]:
    if proposed is None:
        return []
    if proposed == current:
        return [f"Status is already {current}"] if explicit else []
    return policy.check(target_type, current, proposed)


def validate_loan_mutation(request, actor: ActorIdentity | None = None) -> ValidationResult:
    result = ValidationResult()
    result.extend(validate_reason(request.reason))
    result.extend(validate_admin_reference(request.admin_id, actor, required=True))
    result.extend(_check_amount(request.loan_amount, "Loan amount"))
    result.extend(_check_rate(request.interest_rate))
    result.extend(_check_duration(request.duration_months))
    result.extend(_check_status_value(request.status, (status.value for status in LoanStatus)))
    return result


def parse_birth_date(value: str | date | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _years_between(start: date, end: date) -> int:
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years


def _check_birth_date(value: str | None, today: date) -> list[str]:
    if value is None:
        return []
    born = parse_birth_date(value)
    if born is None:
        return ["Invalid date of birth"]
    if born >= today:
        return ["Date of birth must be in the past"]
    if _years_between(born, today) < MIN_AGE_YEARS:
        return [f"User must be at least {MIN_AGE_YEARS} years old"]
    return []


def validate_profile_mutation(
    request, actor: ActorIdentity | None = None, *, today: date | None = None
) -> ValidationResult:
    result = ValidationResult()
    result.extend(validate_reason(request.reason))
    result.extend(validate_admin_reference(request.admin_id, actor, required=True))
    if "full_name" in request.model_fields_set and not (request.full_name or "").strip():
        result.extend(["Full name is required"])
    result.extend(_check_birth_date(request.date_of_birth, today or date.today()))
    result.extend(
        _check_status_value(request.activation_status, (status.value for status in ActivationStatus))
    )
    return result


def validate_withdrawal_mutation(
    request, actor: ActorIdentity | None = None, *, status: str | None = None
) -> ValidationResult:
    result = ValidationResult()
    result.extend(validate_reason(request.reason))
    result.extend(validate_admin_reference(request.admin_id, actor, required=False))
    result.extend(_check_amount(getattr(request, "amount", None), "Withdrawal amount"))
    result.extend(_check_status_value(status, (item.value for item in WithdrawalStatus)))
    return result


def withdrawal_amount_against_balance(amount: Any, previous_balance: Any) -> list[str]:
    proposed = _finite(amount)
    balance = _finite(previous_balance)
    if proposed is None or balance is None:
        return []
    proposed = round_money(proposed)
    if proposed > balance:
        return ["Withdrawal amount exceeds the available balance"]
    return []
