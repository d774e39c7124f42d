"""
KYC document submission and the admin review queue.

A user's KYC row is mirrored onto `User.kyc_status`, which is what the rental
checkout gate reads.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from loguru import logger

from makeeasy.crud.kyc import kyc_crud
from makeeasy.dates import utcnow
from makeeasy.deps import CurrentUser, get_current_user, get_file_store, require_admin
from makeeasy.models import KycStatus
from makeeasy.schemas.common import Envelope, Page, PageParams
from makeeasy.schemas.kyc import (
    AddressProofType,
    CurrentAddress,
    IdProofType,
    KYCFilters,
    KYCReject,
    KYCResponse,
    KYCStats,
    KYCWithUser,
)
from makeeasy.storage import DOCUMENT_TYPES, FileStore

router = APIRouter(prefix="/kyc", tags=["kyc"])

KYC_FOLDER = "kyc"


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="KYC not found")


async def _store_documents(
    files: FileStore, *uploads: UploadFile | None
) -> list[str | None]:
    """Save each given upload; on failure the ones already written are removed."""
    urls: list[str | None] = []
    try:
        for upload in uploads:
            urls.append(
                await files.save(upload, KYC_FOLDER, DOCUMENT_TYPES) if upload else None
            )
    except Exception:
        for url in urls:
            if url:
                files.remove(url)
        raise
    return urls


# ---------------------------------------------------------------------------
# Customer endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/", response_model=Envelope[KYCResponse], status_code=status.HTTP_201_CREATED
)
async def submit_kyc(
    id_proof_type: IdProofType = Form(...),
    id_proof_number: str = Form(..., min_length=1),
    address_proof_type: AddressProofType = Form(...),
    address_line1: str = Form(...),
    city: str = Form(...),
    state: str = Form(...),
    pincode: str = Form(...),
    address_line2: str | None = Form(None),
    landmark: str | None = Form(None),
    id_proof_document: UploadFile | None = File(None),
    address_proof_document: UploadFile | None = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    files: FileStore = Depends(get_file_store),
):
    existing = await kyc_crud.get_for_user(current_user.id)
    if existing and existing.status == KycStatus.VERIFIED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="KYC already verified for this user",
        )
    if not id_proof_document or not address_proof_document:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please upload both ID proof and address proof documents",
        )

    address = CurrentAddress(
        address_line1=address_line1,
        address_line2=address_line2,
        city=city,
        state=state,
        pincode=pincode,
        landmark=landmark,
    )
    id_url, address_url = await _store_documents(
        files, id_proof_document, address_proof_document
    )
    try:
        kyc = await kyc_crud.save_submission(
            current_user.id,
            id_proof={
                "type": id_proof_type.value,
                "number": id_proof_number,
                "document_url": id_url,
                "verified": False,
            },
            address_proof={
                "type": address_proof_type.value,
                "document_url": address_url,
                "verified": False,
            },
            current_address=address.model_dump(),
            submitted_at=utcnow(),
        )
    except Exception:
        files.remove(id_url)
        files.remove(address_url)
        raise

    logger.info("KYC submitted user_id={} kyc_id={}", current_user.id, kyc.id)
    return Envelope(
        message="KYC documents submitted successfully. "
        "Verification usually takes 24-48 hours.",
        data=kyc,
    )


@router.get("/", response_model=Envelope[KYCResponse])
async def get_my_kyc(current_user: CurrentUser = Depends(get_current_user)):
    kyc = await kyc_crud.get_for_user(current_user.id)
    if not kyc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "No KYC documents found",
                "kyc_status": KycStatus.NOT_SUBMITTED.value,
            },
        )
    return Envelope(data=kyc)


@router.put("/", response_model=Envelope[KYCResponse])
async def update_my_kyc(
    id_proof_type: IdProofType | None = Form(None),
    id_proof_number: str | None = Form(None),
    address_proof_type: AddressProofType | None = Form(None),
    address_line1: str | None = Form(None),
    address_line2: str | None = Form(None),
    city: str | None = Form(None),
    state: str | None = Form(None),
    pincode: str | None = Form(None),
    landmark: str | None = Form(None),
    id_proof_document: UploadFile | None = File(None),
    address_proof_document: UploadFile | None = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    files: FileStore = Depends(get_file_store),
):
    kyc = await kyc_crud.get_for_user(current_user.id)
    if not kyc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No KYC found. Please submit KYC first.",
        )
    if kyc.status == KycStatus.VERIFIED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot update verified KYC"
        )

    id_proof = dict(kyc.id_proof)
    address_proof = dict(kyc.address_proof)
    current_address = dict(kyc.current_address)

    if id_proof_type:
        id_proof["type"] = id_proof_type.value
    if id_proof_number:
        id_proof["number"] = id_proof_number
    if address_proof_type:
        address_proof["type"] = address_proof_type.value
    address_changes = {
        "address_line1": address_line1,
        "address_line2": address_line2,
        "city": city,
        "state": state,
        "pincode": pincode,
        "landmark": landmark,
    }
    current_address.update({k: v for k, v in address_changes.items() if v})

    id_url, address_url = await _store_documents(
        files, id_proof_document, address_proof_document
    )
    # A replaced document has to be checked again
    if id_url:
        id_proof.update(document_url=id_url, verified=False)
    if address_url:
        address_proof.update(document_url=address_url, verified=False)

    updated = await kyc_crud.save_submission(
        current_user.id,
        id_proof=id_proof,
        address_proof=address_proof,
        current_address=current_address,
        submitted_at=utcnow(),
    )
    logger.info("KYC resubmitted user_id={}", current_user.id)
    return Envelope(message="KYC documents updated successfully", data=updated)


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------


@router.get(
    "/admin/all",
    response_model=Page[KYCWithUser],
    dependencies=[Depends(require_admin)],
)
async def list_kyc_submissions(filters: KYCFilters = Depends()):
    items, total = await kyc_crud.list_all(filters)
    return Page.of(items, total, PageParams(page=filters.page, limit=filters.limit))


@router.get(
    "/admin/stats",
    response_model=Envelope[KYCStats],
    dependencies=[Depends(require_admin)],
)
async def kyc_stats():
    return Envelope(data=await kyc_crud.stats())


@router.get(
    "/admin/{kyc_id}",
    response_model=Envelope[KYCWithUser],
    dependencies=[Depends(require_admin)],
)
async def get_kyc(kyc_id: UUID):
    kyc = await kyc_crud.get_with_user(kyc_id)
    if not kyc:
        raise _not_found()
    return Envelope(data=kyc)


@router.post("/admin/{kyc_id}/verify", response_model=Envelope[KYCResponse])
async def verify_kyc(kyc_id: UUID, admin: CurrentUser = Depends(require_admin)):
    kyc = await kyc_crud.get_by(id=kyc_id)
    if not kyc:
        raise _not_found()
    if kyc.status == KycStatus.VERIFIED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="KYC already verified"
        )

    updated = await kyc_crud.set_status(
        kyc_id,
        KycStatus.VERIFIED,
        id_proof={**kyc.id_proof, "verified": True},
        address_proof={**kyc.address_proof, "verified": True},
        rejection_reason=None,
        verified_by_id=admin.id,
        verified_at=utcnow(),
    )
    logger.info("KYC verified kyc_id={} by={}", kyc_id, admin.id)
    return Envelope(message="KYC verified successfully", data=updated)


@router.post("/admin/{kyc_id}/reject", response_model=Envelope[KYCResponse])
async def reject_kyc(
    kyc_id: UUID, payload: KYCReject, admin: CurrentUser = Depends(require_admin)
):
    if not payload.reason:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide a reason for rejection",
        )
    kyc = await kyc_crud.get_by(id=kyc_id)
    if not kyc:
        raise _not_found()
    if kyc.status == KycStatus.VERIFIED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot reject verified KYC"
        )

    updated = await kyc_crud.set_status(
        kyc_id,
        KycStatus.REJECTED,
        rejection_reason=payload.reason,
        verified_by_id=admin.id,
        verified_at=utcnow(),
    )
    logger.info("KYC rejected kyc_id={} by={}", kyc_id, admin.id)
    return Envelope(message="KYC rejected", data=updated)


@router.put(
    "/admin/{kyc_id}/review",
    response_model=Envelope[KYCResponse],
    dependencies=[Depends(require_admin)],
)
async def mark_under_review(kyc_id: UUID):
    updated = await kyc_crud.set_status(kyc_id, KycStatus.UNDER_REVIEW)
    if not updated:
        raise _not_found()
    return Envelope(message="KYC marked as under review", data=updated)
