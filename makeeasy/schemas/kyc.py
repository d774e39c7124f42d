from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from makeeasy.models import KycStatus
from makeeasy.schemas.user import UserSummary


class IdProofType(StrEnum):
    AADHAAR = "aadhaar"
    PAN = "pan"
    PASSPORT = "passport"
    DRIVING_LICENSE = "driving_license"
    VOTER_ID = "voter_id"


class AddressProofType(StrEnum):
    AADHAAR = "aadhaar"
    UTILITY_BILL = "utility_bill"
    BANK_STATEMENT = "bank_statement"
    RENTAL_AGREEMENT = "rental_agreement"


class CurrentAddress(BaseModel):
    address_line1: str = Field(min_length=1)
    address_line2: str | None = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    pincode: str = Field(min_length=1)
    landmark: str | None = None


class KYCResponse(BaseModel):
    id: UUID
    user_id: UUID
    id_proof: dict[str, Any]
    address_proof: dict[str, Any]
    current_address: dict[str, Any]
    status: KycStatus
    rejection_reason: str | None = None
    verified_by_id: UUID | None = None
    verified_at: datetime | None = None
    submitted_at: datetime

    model_config = ConfigDict(from_attributes=True)


class KYCWithUser(KYCResponse):
    user: UserSummary | None = None


class KYCFilters(BaseModel):
    status: KycStatus | None = None

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class KYCReject(BaseModel):
    reason: str | None = None


class KYCStats(BaseModel):
    total: int
    pending: int
    under_review: int
    verified: int
    rejected: int
