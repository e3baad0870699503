from typing import Optional
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.permissions import AdminRole, get_role_permissions
from app.core.security import get_password_hash
from app.models.admin import Admin, AdminActivity


class AdminService:
    @staticmethod
    def record_activity(
        db: AsyncSession,
        admin: Admin,
        action: str,
        target: Optional[str] = None,
        request: Optional[Request] = None,
    ) -> AdminActivity:
        """Queue an activity row; it is saved with the caller's next commit."""
        entry = AdminActivity(
            admin_id=admin.id,
            action=action,
            target=target,
            ip_address=request.client.host if request is not None and request.client else None,
            user_agent=request.headers.get("user-agent") if request is not None else None,
        )
        db.add(entry)
        return entry

    @staticmethod
    def build_admin(
        username: str,
        password: str,
        role: AdminRole = AdminRole.ADMIN,
        permissions: Optional[list] = None,
        **profile,
    ) -> Admin:
        if permissions is None:
            permissions = [p.value for p in get_role_permissions(role)]
        return Admin(
            username=username,
            password_hash=get_password_hash(password),
            role=role,
            permissions=list(permissions),
            is_active=True,
            login_attempts=0,
            **profile,
        )
