from __future__ import annotations

from uuid import UUID

from makeeasy.crud.base import CRUD
from makeeasy.models import User
from makeeasy.roles import Role
from makeeasy.schemas.user import UserRecord, UserResponse


class UserCRUD(CRUD[User, UserResponse]):  # type: ignore
    async def get_record_by_email(self, email: str) -> UserRecord | None:
        inst = await User.get_or_none(email=email.lower())
        if not inst:
            return None
        return UserRecord.model_validate(inst, from_attributes=True)

    async def get_record(self, user_id: UUID) -> UserRecord | None:
        inst = await User.get_or_none(id=user_id)
        if not inst:
            return None
        return UserRecord.model_validate(inst, from_attributes=True)

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
        role: Role = Role.USER,
    ) -> UserResponse:
        inst = await User.create(
            name=name,
            email=email.lower(),
            password_hash=password_hash,
            phone=phone,
            role=role,
        )
        return self.to_schema(inst)

    async def set_password(self, user_id: UUID, password_hash: str) -> None:
        await User.filter(id=user_id).update(password_hash=password_hash)


user_crud = UserCRUD(User, UserResponse)
