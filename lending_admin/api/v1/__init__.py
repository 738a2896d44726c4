from fastapi import APIRouter

from lending_admin.api.v1.routers import (
    audit_logs,
    health,
    loan_admin,
    notifications,
    user_admin,
    withdrawal_admin,
)

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(loan_admin.router)
api_router.include_router(user_admin.router)
api_router.include_router(withdrawal_admin.router)
api_router.include_router(audit_logs.router)
api_router.include_router(notifications.router)

__all__ = ["api_router"]
