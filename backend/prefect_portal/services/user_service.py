"""Admin user management: role grants and the prefect directory"""
from typing import Optional

from sqlalchemy import exists, select

from prefect_portal.core.logging_config import logger
from prefect_portal.core.result import ErrorKind, Result
from prefect_portal.models.user import AppRole, User, UserRoleAssignment
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ListFilter, ResourceService


def has_role_clause(role: AppRole):
    return exists().where(
        UserRoleAssignment.user_id == User.id,
        UserRoleAssignment.role == role,
    )


class UserService(ResourceService[User]):
    model = User
    policy = policies.PROFILES
    resource_name = "User"
    date_field = "created_at"
    status_enum = AppRole
    search_fields = ("first_name", "last_name", "email", "student_id")
    ordering = (("last_name", False), ("first_name", False))

    def apply_filters(self, stmt, filters: ListFilter):
        # ``status`` filters by role here
        role = filters.status
        filters = ListFilter(start_date=filters.start_date, end_date=filters.end_date, search=filters.search)
        stmt = super().apply_filters(stmt, filters)
        if role:
            stmt = stmt.where(has_role_clause(AppRole(role)))
        return stmt

    async def prefects(self) -> Result:
        """Everyone holding the prefect role, for assignment pickers"""
        async def op() -> Result:
            stmt = (
                select(User)
                .where(User.is_active.is_(True))
                .where(has_role_clause(AppRole.PREFECT))
                .order_by(*self.order_clauses())
            )
            return Result.success(list((await self.db.execute(stmt)).scalars().all()))

        return await self._run("prefects", op)

    async def grant_role(self, user_id: str, role: AppRole) -> Result:
        role = AppRole(role)
        if not self.session.is_admin:
            return self.forbidden("grant roles to")

        async def op() -> Result:
            user = await self.db.get(User, user_id)
            if user is None:
                return self.not_found(user_id)
            if role in user.roles:
                return Result.failure(ErrorKind.CONFLICT, f"User already has the {role.value} role",
                                      field="role", resource=self.resource_name)
            user.role_assignments.append(UserRoleAssignment(role=role, assigned_by=self.session.user_id))
            await self._commit(user)
            logger.log_auth_event("role_granted", True, target_user_id=str(user.id), role=role.value,
                                  granted_by=self.session.user_id)
            return Result.success(user)

        return await self._run("grant_role", op, user_id)

    async def revoke_role(self, user_id: str, role: AppRole) -> Result:
        role = AppRole(role)
        if not self.session.is_admin:
            return self.forbidden("revoke roles from")

        async def op() -> Result:
            user = await self.db.get(User, user_id)
            if user is None:
                return self.not_found(user_id)
            stmt = select(UserRoleAssignment).where(
                UserRoleAssignment.user_id == user.id,
                UserRoleAssignment.role == role,
            )
            assignment = (await self.db.execute(stmt)).scalars().first()
            if assignment is None:
                return Result.not_found("Role assignment", role.value)
            user.role_assignments.remove(assignment)
            await self._commit(user)
            logger.log_auth_event("role_revoked", True, target_user_id=str(user.id), role=role.value,
                                  revoked_by=self.session.user_id)
            return Result.success(user)

        return await self._run("revoke_role", op, user_id)
