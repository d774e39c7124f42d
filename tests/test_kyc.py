"""
Endpoint tests for /kyc.

Testing strategy:
  - kyc_crud is patched per-test with AsyncMock (no DB)
  - documents go to the conftest file-store mock
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from makeeasy.schemas.kyc import KYCResponse, KYCStats, KYCWithUser

from .factories import (
    ADMIN_ID,
    CUSTOMER_ID,
    KYC_ID,
    NOW,
    kyc_dict,
    make_customer,
    user_dict,
)

CRUD_PATH = "makeeasy.routers.kyc.kyc_crud"
UTCNOW = "makeeasy.routers.kyc.utcnow"


def kyc_model(**overrides) -> KYCResponse:
    return KYCResponse(**kyc_dict(**overrides))


def submission_form(**overrides) -> dict:
    base = dict(
        id_proof_type="aadhaar",
        id_proof_number="1234-5678-9012",
        address_proof_type="utility_bill",
        address_line1="12 Civil Lines",
        city="Kanpur",
        state="Uttar Pradesh",
        pincode="208001",
    )
    return {**base, **overrides}


DOCUMENTS = [
    ("id_proof_document", ("aadhaar.pdf", b"%PDF-1.4", "application/pdf")),
    ("address_proof_document", ("bill.jpg", b"jpeg", "image/jpeg")),
]


# ---------------------------------------------------------------------------
# POST /kyc
# ---------------------------------------------------------------------------


class TestSubmitKYC:
    def test_submission_is_saved_as_pending(self, customer_client):
        with patch(CRUD_PATH) as mock_crud, patch(UTCNOW, return_value=NOW):
            mock_crud.get_for_user = AsyncMock(return_value=None)
            mock_crud.save_submission = AsyncMock(return_value=kyc_model())
            resp = customer_client.post("/kyc", data=submission_form(), files=DOCUMENTS)
        assert resp.status_code == 201
        assert resp.json()["message"].startswith("KYC documents submitted successfully")

        args, kwargs = mock_crud.save_submission.call_args
        assert args[0] == CUSTOMER_ID
        assert kwargs["id_proof"] == {
            "type": "aadhaar",
            "number": "1234-5678-9012",
            "document_url": "/uploads/kyc/aadhaar.pdf",
            "verified": False,
        }
        assert kwargs["address_proof"]["document_url"] == "/uploads/kyc/bill.jpg"
        assert kwargs["current_address"]["city"] == "Kanpur"
        assert kwargs["submitted_at"] == NOW

    def test_resubmission_after_rejection_allowed(self, customer_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=kyc_model(status="rejected"))
            mock_crud.save_submission = AsyncMock(return_value=kyc_model())
            resp = customer_client.post("/kyc", data=submission_form(), files=DOCUMENTS)
        assert resp.status_code == 201

    def test_already_verified(self, customer_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=kyc_model(status="verified"))
            resp = customer_client.post("/kyc", data=submission_form(), files=DOCUMENTS)
        assert resp.status_code == 400
        assert resp.json()["error"] == "KYC already verified for this user"

    def test_both_documents_required(self, customer_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=None)
            resp = customer_client.post(
                "/kyc", data=submission_form(), files=DOCUMENTS[:1]
            )
        assert resp.status_code == 400
        assert resp.json()["error"] == (
            "Please upload both ID proof and address proof documents"
        )

    def test_uploads_removed_when_save_fails(self, client_factory):
        store = MagicMock()
        store.save = AsyncMock(side_effect=["/uploads/kyc/a.pdf", "/uploads/kyc/b.jpg"])
        store.remove = MagicMock()
        client = client_factory(make_customer(), file_store=store)
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=None)
            mock_crud.save_submission = AsyncMock(side_effect=RuntimeError("db down"))
            with pytest.raises(RuntimeError):
                client.post("/kyc", data=submission_form(), files=DOCUMENTS)
        removed = [c.args[0] for c in store.remove.call_args_list]
        assert removed == ["/uploads/kyc/a.pdf", "/uploads/kyc/b.jpg"]


# ---------------------------------------------------------------------------
# GET / PUT /kyc
# ---------------------------------------------------------------------------


class TestOwnKYC:
    def test_get_status(self, customer_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=kyc_model())
            resp = customer_client.get("/kyc")
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "pending"

    def test_not_submitted(self, customer_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=None)
            resp = customer_client.get("/kyc")
        assert resp.status_code == 404
        assert resp.json() == {
            "success": False,
            "error": "No KYC documents found",
            "kyc_status": "not_submitted",
        }

    def test_update_replaces_document_and_resets_flag(self, customer_client):
        existing = kyc_model(
            status="rejected",
            id_proof=dict(kyc_dict()["id_proof"], verified=True),
        )
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=existing)
            mock_crud.save_submission = AsyncMock(return_value=kyc_model())
            resp = customer_client.put(
                "/kyc",
                data={"city": "Lucknow"},
                files=[("id_proof_document", ("new.pdf", b"%PDF", "application/pdf"))],
            )
        assert resp.status_code == 200
        _, kwargs = mock_crud.save_submission.call_args
        assert kwargs["id_proof"]["document_url"] == "/uploads/kyc/new.pdf"
        assert kwargs["id_proof"]["verified"] is False
        assert kwargs["id_proof"]["number"] == "1234-5678-9012"
        assert kwargs["address_proof"]["document_url"] == "/uploads/kyc/bill.pdf"
        assert kwargs["current_address"]["city"] == "Lucknow"
        assert kwargs["current_address"]["address_line1"] == "12 Civil Lines"

    def test_update_without_submission(self, customer_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=None)
            resp = customer_client.put("/kyc", data={"city": "Lucknow"})
        assert resp.status_code == 404
        assert resp.json()["error"] == "No KYC found. Please submit KYC first."

    def test_verified_kyc_is_locked(self, customer_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_for_user = AsyncMock(return_value=kyc_model(status="verified"))
            resp = customer_client.put("/kyc", data={"city": "Lucknow"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Cannot update verified KYC"


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------


class TestAdminReview:
    def test_verify_marks_both_proofs(self, admin_client):
        with patch(CRUD_PATH) as mock_crud, patch(UTCNOW, return_value=NOW):
            mock_crud.get_by = AsyncMock(return_value=kyc_model())
            mock_crud.set_status = AsyncMock(return_value=kyc_model(status="verified"))
            resp = admin_client.post(f"/kyc/admin/{KYC_ID}/verify")
        assert resp.status_code == 200
        args, kwargs = mock_crud.set_status.call_args
        assert args == (KYC_ID, "verified")
        assert kwargs["id_proof"]["verified"] is True
        assert kwargs["address_proof"]["verified"] is True
        assert kwargs["verified_by_id"] == ADMIN_ID
        assert kwargs["verified_at"] == NOW

    def test_verify_twice_rejected(self, admin_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_by = AsyncMock(return_value=kyc_model(status="verified"))
            resp = admin_client.post(f"/kyc/admin/{KYC_ID}/verify")
        assert resp.status_code == 400
        assert resp.json()["error"] == "KYC already verified"

    def test_verify_missing(self, admin_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_by = AsyncMock(return_value=None)
            resp = admin_client.post(f"/kyc/admin/{KYC_ID}/verify")
        assert resp.status_code == 404

    def test_reject_with_reason(self, admin_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_by = AsyncMock(return_value=kyc_model())
            mock_crud.set_status = AsyncMock(return_value=kyc_model(status="rejected"))
            resp = admin_client.post(
                f"/kyc/admin/{KYC_ID}/reject", json={"reason": "Blurry ID scan"}
            )
        assert resp.status_code == 200
        args, kwargs = mock_crud.set_status.call_args
        assert args == (KYC_ID, "rejected")
        assert kwargs["rejection_reason"] == "Blurry ID scan"

    def test_reject_needs_reason(self, admin_client):
        resp = admin_client.post(f"/kyc/admin/{KYC_ID}/reject", json={})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Please provide a reason for rejection"

    def test_reject_verified_refused(self, admin_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_by = AsyncMock(return_value=kyc_model(status="verified"))
            resp = admin_client.post(
                f"/kyc/admin/{KYC_ID}/reject", json={"reason": "late"}
            )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Cannot reject verified KYC"

    def test_mark_under_review(self, admin_client):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.set_status = AsyncMock(
                return_value=kyc_model(status="under_review")
            )
            resp = admin_client.put(f"/kyc/admin/{KYC_ID}/review")
        assert resp.status_code == 200
        mock_crud.set_status.assert_awaited_once_with(KYC_ID, "under_review")

    def test_listing_includes_user(self, admin_client):
        item = KYCWithUser(**kyc_dict(), user=user_dict())
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.list_all = AsyncMock(return_value=([item], 1))
            resp = admin_client.get("/kyc/admin/all", params={"status": "pending"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["data"][0]["user"]["email"] == "user@makeeasy.com"
        (filters,), _ = mock_crud.list_all.call_args
        assert filters.status == "pending"

    def test_stats(self, admin_client):
        stats = KYCStats(total=4, pending=1, under_review=1, verified=1, rejected=1)
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.stats = AsyncMock(return_value=stats)
            resp = admin_client.get("/kyc/admin/stats")
        assert resp.json()["data"]["total"] == 4

    def test_customer_cannot_review(self, customer_client):
        resp = customer_client.post(f"/kyc/admin/{KYC_ID}/verify")
        assert resp.status_code == 403
