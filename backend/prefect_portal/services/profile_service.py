"""Profiles: the user row as seen and edited by its owner (or an admin)"""
from pathlib import PurePath
from typing import Any, Dict, Optional

from prefect_portal.core.config import settings
from prefect_portal.core.exceptions import InvalidFileTypeError, ValidationError
from prefect_portal.core.result import Result
from prefect_portal.models.user import Theme, User
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService
from prefect_portal.services.storage_service import StorageService, avatar_key, storage_service

PROFILE_FIELDS = frozenset({
    "first_name", "last_name", "student_id", "phone", "department",
    "year_level", "section", "theme",
})
ADMIN_PROFILE_FIELDS = PROFILE_FIELDS | {"is_active", "email"}


class ProfileService(ResourceService[User]):
    model = User
    policy = policies.PROFILES
    resource_name = "Profile"
    search_fields = ("first_name", "last_name", "email", "student_id")
    ordering = (("last_name", False), ("first_name", False))
    required_fields = {"first_name": "First name is required", "last_name": "Last name is required"}

    def __init__(self, db, session, storage: Optional[StorageService] = None):
        super().__init__(db, session)
        self.storage = storage or storage_service

    def mutable_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        allowed = ADMIN_PROFILE_FIELDS if self.session.is_admin else PROFILE_FIELDS
        return {k: v for k, v in changes.items() if k in allowed}

    def validate(self, data: Dict[str, Any], existing: Optional[User]) -> Optional[Result]:
        if data.get("year_level") is not None and not 1 <= int(data["year_level"]) <= 12:
            return Result.invalid("Year level must be between 1 and 12", field="year_level")
        if "theme" in data and data["theme"] is not None:
            try:
                data["theme"] = Theme(data["theme"])
            except ValueError:
                return Result.invalid(f"Invalid theme '{data['theme']}'", field="theme")
        return None

    def conflict_message(self, error) -> str:
        return "Email or student ID is already in use"

    async def me(self) -> Result:
        return await self.get(self.session.user_id)

    async def update_me(self, changes: Dict[str, Any]) -> Result:
        return await self.update(self.session.user_id, changes)

    async def set_theme(self, theme: Theme) -> Result:
        return await self.update_me({"theme": theme})

    # ==================== Avatars ====================

    @staticmethod
    def check_avatar(filename: str, content: bytes) -> str:
        """Extension of an acceptable avatar upload; raises ValidationError otherwise"""
        extension = PurePath(filename or "").suffix.lower().lstrip(".")
        allowed = settings.AVATAR_ALLOWED_EXTENSIONS
        if extension not in allowed:
            raise InvalidFileTypeError(extension or "unknown", allowed)
        if not content:
            raise ValidationError("Avatar file is empty", field="file")
        if len(content) > settings.AVATAR_MAX_BYTES:
            raise ValidationError(
                f"Avatar exceeds {settings.AVATAR_MAX_BYTES // 1024} KB", field="file"
            )
        return extension

    async def upload_avatar(self, filename: str, content: bytes, content_type: str) -> Result:
        try:
            extension = self.check_avatar(filename, content)
        except ValidationError as e:
            return Result.invalid(e.message, field=e.field)

        previous = self.session.user.avatar_url
        url = await self.storage.save(avatar_key(self.session.user_id, extension), content, content_type)
        result = await self._set_avatar(url)
        if result.ok:
            await self._discard(previous)
        else:
            await self._discard(url)
        return result

    async def remove_avatar(self) -> Result:
        previous = self.session.user.avatar_url
        result = await self._set_avatar(None)
        if result.ok:
            await self._discard(previous)
        return result

    async def _set_avatar(self, url: Optional[str]) -> Result:
        async def op() -> Result:
            user = await self.db.get(User, self.session.user_id)
            if user is None:
                return self.not_found(self.session.user_id)
            user.avatar_url = url
            await self._commit(user)
            return Result.success(user)

        return await self._run("avatar", op, self.session.user_id)

    async def _discard(self, url: Optional[str]) -> None:
        key = self.storage.key_from_url(url)
        if key:
            await self.storage.delete(key)
