from __future__ import annotations

from uuid import UUID

from tortoise.transactions import in_transaction

from makeeasy.crud.base import CRUD
from makeeasy.models import KYC, KycStatus, User
from makeeasy.schemas.kyc import KYCFilters, KYCResponse, KYCStats, KYCWithUser


class KYCCRUD(CRUD[KYC, KYCResponse]):  # type: ignore
    async def get_for_user(self, user_id: UUID) -> KYCResponse | None:
        return await self.get_by(user_id=user_id)

    async def save_submission(self, user_id: UUID, **data) -> KYCResponse:
        """
        Create or overwrite the user's KYC row as a fresh pending submission
        and mirror the status onto the user.
        """
        async with in_transaction():
            inst = await KYC.get_or_none(user_id=user_id)
            if inst is None:
                inst = await KYC.create(
                    user_id=user_id, status=KycStatus.PENDING, **data
                )
            else:
                inst.update_from_dict(
                    {
                        **data,
                        "status": KycStatus.PENDING,
                        "rejection_reason": None,
                        "verified_by_id": None,
                        "verified_at": None,
                    }
                )
                await inst.save()
            await User.filter(id=user_id).update(kyc_status=KycStatus.PENDING)
        return self.to_schema(inst)

    async def set_status(
        self, kyc_id: UUID, status: KycStatus, **data
    ) -> KYCResponse | None:
        """Move a KYC row to `status`, mirroring it onto the owning user."""
        async with in_transaction():
            inst = await KYC.get_or_none(id=kyc_id)
            if not inst:
                return None
            inst.update_from_dict({**data, "status": status})
            await inst.save()
            await User.filter(id=inst.user_id).update(kyc_status=status)
        return self.to_schema(inst)

    async def get_with_user(self, kyc_id: UUID) -> KYCWithUser | None:
        inst = await KYC.get_or_none(id=kyc_id).prefetch_related("user")
        if not inst:
            return None
        return KYCWithUser.model_validate(inst, from_attributes=True)

    async def list_all(self, filters: KYCFilters) -> tuple[list[KYCWithUser], int]:
        qs = KYC.all()
        if filters.status is not None:
            qs = qs.filter(status=filters.status)
        total = await qs.count()
        offset = (filters.page - 1) * filters.limit
        rows = (
            await qs.order_by("-submitted_at")
            .offset(offset)
            .limit(filters.limit)
            .prefetch_related("user")
        )
        items = [KYCWithUser.model_validate(r, from_attributes=True) for r in rows]
        return items, total

    async def stats(self) -> KYCStats:
        return KYCStats(
            total=await KYC.all().count(),
            pending=await KYC.filter(status=KycStatus.PENDING).count(),
            under_review=await KYC.filter(status=KycStatus.UNDER_REVIEW).count(),
            verified=await KYC.filter(status=KycStatus.VERIFIED).count(),
            rejected=await KYC.filter(status=KycStatus.REJECTED).count(),
        )


kyc_crud = KYCCRUD(KYC, KYCResponse)
