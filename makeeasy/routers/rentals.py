"""
Rental lifecycle endpoints.

Customer actions (pause, resume, early closure) and the admin scheduling
actions go through the transition tables in makeeasy.lifecycle. The admin
status update is a direct set and bypasses them.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from makeeasy.crud.bookings import bill_crud, rental_crud
from makeeasy.crud.catalog import add_on_crud, product_crud
from makeeasy.dates import add_months, to_utc, utcnow
from makeeasy.deps import CurrentUser, get_current_user, require_admin
from makeeasy.lifecycle import (
    DELIVERY_TRANSITIONS,
    RENTAL_TRANSITIONS,
    BookingStatus,
    BookingType,
    DeliveryAction,
    DeliveryStatus,
    DepositStatus,
    ExtensionStatus,
    PaymentStatus,
    RentalAction,
    RentalStatus,
    TransitionRejected,
    transition,
)
from makeeasy.models import BillStatus, KycStatus
from makeeasy.pricing import (
    AddOnSnapshot,
    can_request_early_closure,
    early_closure_charge,
    find_city_pricing,
    find_tenure_pricing,
    is_in_stock,
    planned_end_date,
    quote_rental,
    remaining_months,
)
from makeeasy.schemas.booking import (
    BillCreate,
    BillPayment,
    BillResponse,
    DeliverySchedule,
    EarlyClosureCharges,
    EarlyClosureResponse,
    ExtensionCreate,
    PickupSchedule,
    RentalCreate,
    RentalCreated,
    RentalDetail,
    RentalFilters,
    RentalResponse,
    RentalStatusUpdate,
    RentalSummary,
)
from makeeasy.schemas.catalog import AddOnResponse
from makeeasy.schemas.common import Envelope, Listing, Page, PageParams

router = APIRouter(prefix="/rentals", tags=["rentals"])


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Rental not found"
    )


async def _get_rental(rental_id: UUID) -> RentalResponse:
    rental = await rental_crud.get_rental(rental_id)
    if not rental or rental.booking_type != BookingType.RENTAL:
        raise _not_found()
    return rental


async def _own_rental(rental_id: UUID, current_user: CurrentUser) -> RentalResponse:
    """Customer actions: 404 before 403, and only the renter may act."""
    rental = await _get_rental(rental_id)
    if rental.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized"
        )
    return rental


async def _save(rental_id: UUID, **data) -> RentalResponse:
    rental = await rental_crud.update_rental(rental_id, **data)
    if not rental:
        raise _not_found()
    return rental


def _with_add_on_details(
    rental: RentalResponse, add_ons: list[AddOnResponse]
) -> RentalResponse:
    """Attach description and coverage to the stored price snapshots."""
    details = {str(a.id): a for a in add_ons}
    selected = []
    for entry in rental.selected_add_ons:
        add_on = details.get(str(entry.get("add_on_id")))
        if add_on is not None:
            entry = {
                **entry,
                "description": add_on.description,
                "coverage": add_on.coverage,
            }
        selected.append(entry)
    return rental.model_copy(update={"selected_add_ons": selected})


# ---------------------------------------------------------------------------
# Customer endpoints
# ---------------------------------------------------------------------------


@router.post("/", response_model=RentalCreated, status_code=status.HTTP_201_CREATED)
async def create_rental(
    payload: RentalCreate,
    current_user: CurrentUser = Depends(get_current_user),
) -> RentalCreated:
    product = await product_crud.get_by(id=payload.product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )

    city = payload.selected_city
    city_entry = find_city_pricing(
        [c.model_dump() for c in product.city_pricing], city
    )
    if city_entry is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Product not available in {city}",
        )
    if not is_in_stock(city_entry):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Product is out of stock in {city}",
        )

    tenure = find_tenure_pricing(city_entry, payload.selected_tenure)
    if tenure is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No tenure pricing available for this product",
        )

    if current_user.kyc_status != KycStatus.VERIFIED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "KYC verification required before renting",
                "redirect": "/kyc-upload",
                "kyc_status": current_user.kyc_status,
            },
        )

    add_ons = await add_on_crud.get_active_by_ids(
        [choice.add_on_id for choice in payload.selected_add_ons]
    )
    snapshots = [AddOnSnapshot.from_add_on(a) for a in add_ons]
    quote = quote_rental(
        tenure["monthly_rent"],
        city_entry.get("deposit"),
        city_entry.get("delivery_charge"),
        snapshots,
    )

    now = utcnow()
    end = planned_end_date(now, payload.selected_tenure)
    rental = await rental_crud.create_rental(
        user_id=current_user.id,
        product_id=payload.product_id,
        selected_city=city,
        selected_tenure=payload.selected_tenure,
        monthly_rent=quote.monthly_rent,
        deposit_amount=quote.deposit,
        deposit_status=DepositStatus.PENDING,
        delivery_charge=quote.delivery_charge,
        selected_add_ons=[s.to_dict() for s in snapshots],
        delivery_address=payload.delivery_address.model_dump(mode="json"),
        delivery_date=payload.delivery_date,
        delivery_time_slot=payload.delivery_time_slot,
        delivery_status=DeliveryStatus.PENDING,
        rental_status=RentalStatus.PENDING_DELIVERY,
        start_date=now,
        end_date=end,
        planned_end_date=end,
        total_amount=quote.total,
        payment_status=PaymentStatus.PENDING,
        booking_status=BookingStatus.PENDING,
        customer_name=current_user.name,
        customer_email=current_user.email,
        customer_phone=current_user.phone or "N/A",
    )
    logger.info(
        "Rental created id={} product_id={} tenure={} total={}",
        rental.id,
        payload.product_id,
        payload.selected_tenure,
        quote.total,
    )
    return RentalCreated(
        data=_with_add_on_details(rental, add_ons),
        summary=RentalSummary(**quote.as_summary()),
    )


@router.get("/", response_model=Listing[RentalResponse])
async def list_my_rentals(
    rental_status: RentalStatus | None = Query(default=None, alias="status"),
    current_user: CurrentUser = Depends(get_current_user),
):
    rentals = await rental_crud.list_rentals(current_user.id, status=rental_status)
    return Listing.of(rentals)


# Admin listing is declared ahead of /{rental_id} so "admin" never parses as an id.
@router.get(
    "/admin/all",
    response_model=Page[RentalResponse],
    dependencies=[Depends(require_admin)],
)
async def list_all_rentals(filters: RentalFilters = Depends()):
    rentals, total = await rental_crud.list_all_rentals(filters)
    return Page.of(rentals, total, PageParams(page=filters.page, limit=filters.limit))


@router.get("/{rental_id}", response_model=Envelope[RentalDetail])
async def get_rental(
    rental_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    rental = await _get_rental(rental_id)
    if rental.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this rental",
        )
    detail = RentalDetail(
        **rental.model_dump(), remaining_months=remaining_months(rental)
    )
    return Envelope(data=detail)


@router.post("/{rental_id}/extend", response_model=Envelope[RentalResponse])
async def request_extension(
    rental_id: UUID,
    payload: ExtensionCreate,
    current_user: CurrentUser = Depends(get_current_user),
):
    months = payload.additional_months
    if months is None or months < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please specify valid number of months (minimum 1)",
        )
    rental = await _own_rental(rental_id, current_user)

    current_end = to_utc(rental.planned_end_date or rental.end_date)
    request = {
        "requested_months": months,
        "requested_at": utcnow().isoformat(),
        "status": ExtensionStatus.PENDING.value,
        "approved_at": None,
        "new_end_date": add_months(current_end, months).isoformat(),
    }
    updated = await _save(
        rental_id, extension_requests=[*rental.extension_requests, request]
    )
    logger.info("Extension requested rental_id={} months={}", rental_id, months)
    return Envelope(message="Extension request submitted successfully", data=updated)


@router.post("/{rental_id}/early-closure", response_model=EarlyClosureResponse)
async def request_early_closure(
    rental_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
) -> EarlyClosureResponse:
    rental = await _own_rental(rental_id, current_user)

    action = RentalAction.REQUEST_EARLY_CLOSURE
    target = transition(RENTAL_TRANSITIONS, rental.rental_status, action)
    now = utcnow()
    if not can_request_early_closure(rental, now):
        raise TransitionRejected(
            action, rental.rental_status, RENTAL_TRANSITIONS[action].message
        )

    product = await product_crud.get_by(id=rental.product_id)
    charge = early_closure_charge(
        product.early_closure_charge if product else None, rental.monthly_rent
    )
    remaining = remaining_months(rental, now)
    updated = await _save(
        rental_id,
        early_closure_requested=True,
        early_closure_request_date=now,
        early_closure_charge=charge,
        rental_status=target,
    )
    logger.info("Early closure requested rental_id={} charge={}", rental_id, charge)
    return EarlyClosureResponse(
        data=updated,
        charges=EarlyClosureCharges(
            early_closure_charge=charge, remaining_months=remaining
        ),
    )


@router.put("/{rental_id}/pause", response_model=Envelope[RentalResponse])
async def pause_rental(
    rental_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    rental = await _own_rental(rental_id, current_user)
    target = transition(RENTAL_TRANSITIONS, rental.rental_status, RentalAction.PAUSE)
    updated = await _save(rental_id, rental_status=target)
    logger.info("Rental paused id={}", rental_id)
    return Envelope(message="Rental paused successfully", data=updated)


@router.put("/{rental_id}/resume", response_model=Envelope[RentalResponse])
async def resume_rental(
    rental_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    rental = await _own_rental(rental_id, current_user)
    target = transition(RENTAL_TRANSITIONS, rental.rental_status, RentalAction.RESUME)
    updated = await _save(rental_id, rental_status=target)
    logger.info("Rental resumed id={}", rental_id)
    return Envelope(message="Rental resumed successfully", data=updated)


@router.get("/{rental_id}/bills", response_model=Listing[BillResponse])
async def list_bills(
    rental_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
):
    rental = await _get_rental(rental_id)
    if rental.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to access this rental",
        )
    return Listing.of(await bill_crud.list_for_booking(rental_id))


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------


@router.put(
    "/admin/{rental_id}/status",
    response_model=Envelope[RentalResponse],
    dependencies=[Depends(require_admin)],
)
async def update_rental_status(rental_id: UUID, payload: RentalStatusUpdate):
    rental = await _get_rental(rental_id)

    data: dict = {}
    if payload.rental_status is not None:
        data["rental_status"] = payload.rental_status
        first_activation = rental.rental_start_date is None
        if payload.rental_status == RentalStatus.ACTIVE and first_activation:
            now = utcnow()
            data["rental_start_date"] = now
            data["billing_cycle_start"] = now.day
            data["next_billing_date"] = add_months(now, 1)
    if payload.delivery_status is not None:
        data["delivery_status"] = payload.delivery_status
    if payload.notes:
        data["notes"] = payload.notes

    updated = await _save(rental_id, **data)
    logger.info("Rental status set id={} changes={}", rental_id, sorted(data))
    return Envelope(message="Rental status updated", data=updated)


@router.put(
    "/admin/{rental_id}/schedule-delivery",
    response_model=Envelope[RentalResponse],
    dependencies=[Depends(require_admin)],
)
async def schedule_delivery(rental_id: UUID, payload: DeliverySchedule):
    rental = await _get_rental(rental_id)
    target = transition(
        DELIVERY_TRANSITIONS, rental.delivery_status, DeliveryAction.SCHEDULE
    )
    updated = await _save(
        rental_id,
        delivery_date=payload.delivery_date,
        delivery_time_slot=payload.delivery_time_slot,
        delivery_status=target,
        booking_status=BookingStatus.CONFIRMED,
    )
    return Envelope(message="Delivery scheduled successfully", data=updated)


@router.put(
    "/admin/{rental_id}/schedule-pickup",
    response_model=Envelope[RentalResponse],
    dependencies=[Depends(require_admin)],
)
async def schedule_pickup(rental_id: UUID, payload: PickupSchedule):
    rental = await _get_rental(rental_id)
    target = transition(
        RENTAL_TRANSITIONS, rental.rental_status, RentalAction.SCHEDULE_PICKUP
    )
    updated = await _save(
        rental_id,
        pickup_scheduled_date=payload.pickup_date,
        pickup_time_slot=payload.pickup_time_slot,
        rental_status=target,
    )
    return Envelope(message="Pickup scheduled successfully", data=updated)


@router.put(
    "/admin/{rental_id}/approve-extension/{request_index}",
    response_model=Envelope[RentalResponse],
    dependencies=[Depends(require_admin)],
)
async def approve_extension(rental_id: UUID, request_index: int):
    rental = await _get_rental(rental_id)
    if not 0 <= request_index < len(rental.extension_requests):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Extension request not found",
        )

    requests = [dict(r) for r in rental.extension_requests]
    request = requests[request_index]
    if request.get("status") != ExtensionStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Extension request is already {request.get('status')}",
        )
    request["status"] = ExtensionStatus.APPROVED.value
    request["approved_at"] = utcnow().isoformat()
    new_end = datetime.fromisoformat(request["new_end_date"])
    tenure = (rental.selected_tenure or 0) + int(request["requested_months"])

    target = transition(
        RENTAL_TRANSITIONS, rental.rental_status, RentalAction.APPROVE_EXTENSION
    )
    updated = await _save(
        rental_id,
        extension_requests=requests,
        planned_end_date=new_end,
        end_date=new_end,
        selected_tenure=tenure,
        rental_status=target,
    )
    logger.info("Extension approved rental_id={} new_end={}", rental_id, new_end)
    return Envelope(message="Extension request approved", data=updated)


@router.post(
    "/admin/{rental_id}/bills",
    response_model=Envelope[BillResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_bill(rental_id: UUID, payload: BillCreate):
    rental = await _get_rental(rental_id)
    if payload.add_ons is None:
        add_ons = [
            {
                "add_on_id": a["add_on_id"],
                "name": a["name"],
                "charge": a["monthly_charge"],
            }
            for a in rental.selected_add_ons
        ]
    else:
        add_ons = [a.model_dump(mode="json") for a in payload.add_ons]

    bill = await bill_crud.create(
        user_id=rental.user_id,
        booking_id=rental.id,
        product_id=rental.product_id,
        billing_month=payload.billing_month,
        billing_year=payload.billing_year,
        rental_amount=(
            payload.rental_amount
            if payload.rental_amount is not None
            else rental.monthly_rent
        ),
        add_ons=add_ons,
        late_fee=payload.late_fee,
        due_date=payload.due_date,
        notes=payload.notes,
    )
    return Envelope(message="Bill created", data=bill)


@router.put(
    "/admin/bills/{bill_id}/payment",
    response_model=Envelope[BillResponse],
    dependencies=[Depends(require_admin)],
)
async def record_bill_payment(bill_id: UUID, payload: BillPayment):
    data = payload.model_dump(exclude_unset=True)
    if payload.payment_status == BillStatus.PAID:
        data["paid_date"] = utcnow()
    bill = await bill_crud.update_by(bill_id, **data)
    if not bill:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found"
        )
    return Envelope(data=bill)
