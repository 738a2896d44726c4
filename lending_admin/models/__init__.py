from lending_admin.models.audit_entry import AuditEntry
from lending_admin.models.loan import Loan
from lending_admin.models.notification import Notification
from lending_admin.models.user_profile import UserActivationProfile
from lending_admin.models.withdrawal import Withdrawal

__all__ = [
    "AuditEntry",
    "Loan",
    "Notification",
    "UserActivationProfile",
    "Withdrawal",
]
