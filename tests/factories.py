"""
Shared ids and payload builders for the test modules.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from makeeasy.deps import CurrentUser
from makeeasy.models import KycStatus
from makeeasy.roles import Role

# ---------------------------------------------------------------------------
# Stable IDs for assertions that need a known UUID
# Call uuid4() inline when you need a fresh one per test.
# ---------------------------------------------------------------------------

CUSTOMER_ID: UUID = uuid4()
ADMIN_ID: UUID = uuid4()
OTHER_USER_ID: UUID = uuid4()
TECHNICIAN_ID: UUID = uuid4()

BOOKING_ID: UUID = uuid4()
ORDER_ID: UUID = uuid4()
PRODUCT_ID: UUID = uuid4()
SERVICE_ID: UUID = uuid4()
ADD_ON_ID: UUID = uuid4()
SERVICE_REQUEST_ID: UUID = uuid4()
KYC_ID: UUID = uuid4()
CART_ID: UUID = uuid4()
BILL_ID: UUID = uuid4()

NOW = datetime(2026, 6, 1, 10, 0, 0, tzinfo=UTC)
LATER = NOW + timedelta(days=1)


# ---------------------------------------------------------------------------
# User factories
# ---------------------------------------------------------------------------


def make_customer(
    user_id: UUID = CUSTOMER_ID,
    kyc_status: KycStatus = KycStatus.VERIFIED,
) -> CurrentUser:
    """Customer whose KYC is verified unless told otherwise."""
    return CurrentUser(
        id=user_id,
        name="Test Customer",
        email="user@makeeasy.com",
        phone="9876543210",
        role=Role.USER,
        kyc_status=kyc_status,
    )


def make_admin() -> CurrentUser:
    return CurrentUser(
        id=ADMIN_ID,
        name="Admin",
        email="admin@makeeasy.com",
        role=Role.ADMIN,
        kyc_status=KycStatus.VERIFIED,
    )


def user_dict(user_id: UUID = CUSTOMER_ID, **overrides) -> dict:
    base = dict(
        id=str(user_id),
        name="Test Customer",
        email="user@makeeasy.com",
        phone="9876543210",
        role="user",
        kyc_status="verified",
        profile_image=None,
        created_at=NOW.isoformat(),
    )
    return {**base, **overrides}


# ---------------------------------------------------------------------------
# Catalog factories
# ---------------------------------------------------------------------------


def city_pricing_dict(**overrides) -> dict:
    base = dict(
        city="Kanpur",
        deposit="2000",
        delivery_charge="100",
        stock=5,
        available=True,
        tenures=[
            dict(months=3, monthly_rent="1200"),
            dict(months=6, monthly_rent="1000"),
            dict(months=12, monthly_rent="800"),
        ],
    )
    return {**base, **overrides}


def product_dict(**overrides) -> dict:
    base = dict(
        id=str(PRODUCT_ID),
        title="Double Door Refrigerator",
        description="260L frost free",
        price="1000",
        location="Kanpur",
        category="/appliances",
        image_url="/uploads/products/fridge.jpg",
        available=True,
        featured=False,
        specifications={"capacity": "260L"},
        city_pricing=[city_pricing_dict()],
        early_closure_charge=None,
        created_at=NOW.isoformat(),
    )
    return {**base, **overrides}


def service_dict(**overrides) -> dict:
    base = dict(
        id=str(SERVICE_ID),
        title="AC Service",
        description="Full AC servicing",
        icon="ac",
        image=None,
        price="499",
        available=True,
        featured=False,
        created_at=NOW.isoformat(),
    )
    return {**base, **overrides}


def add_on_dict(**overrides) -> dict:
    base = dict(
        id=str(ADD_ON_ID),
        name="Stabilizer",
        description="Voltage stabilizer",
        type="accessory",
        monthly_charge="50",
        one_time_charge="20",
        active=True,
        display_order=0,
    )
    return {**base, **overrides}


# ---------------------------------------------------------------------------
# Booking / rental factories  (mirror what the CRUD layer returns as dicts)
# ---------------------------------------------------------------------------


def booking_dict(**overrides) -> dict:
    """Generic service booking."""
    base = dict(
        id=str(BOOKING_ID),
        user_id=str(CUSTOMER_ID),
        order_id=None,
        product_id=None,
        service_id=str(SERVICE_ID),
        booking_type="service",
        start_date=NOW.isoformat(),
        end_date=LATER.isoformat(),
        total_amount="499",
        payment_status="pending",
        booking_status="pending",
        customer_name="Test Customer",
        customer_email="user@makeeasy.com",
        customer_phone="9876543210",
        notes=None,
        created_at=NOW.isoformat(),
        updated_at=NOW.isoformat(),
    )
    return {**base, **overrides}


def rental_dict(**overrides) -> dict:
    """Active six month rental of the refrigerator, started at NOW."""
    end = NOW.replace(month=12)
    base = dict(
        booking_dict(),
        product_id=str(PRODUCT_ID),
        service_id=None,
        booking_type="rental",
        selected_city="Kanpur",
        selected_tenure=6,
        monthly_rent="1000",
        deposit_amount="2000",
        deposit_status="pending",
        delivery_charge="100",
        selected_add_ons=[
            dict(
                add_on_id=str(ADD_ON_ID),
                name="Stabilizer",
                monthly_charge="50",
                one_time_charge="20",
            )
        ],
        delivery_address=dict(address_line1="12 Civil Lines", city="Kanpur"),
        delivery_status="delivered",
        rental_status="active",
        rental_start_date=NOW.isoformat(),
        planned_end_date=end.isoformat(),
        end_date=end.isoformat(),
        extension_requests=[],
        early_closure_requested=False,
        total_amount="3740.60",
        product=dict(id=str(PRODUCT_ID), title="Double Door Refrigerator"),
    )
    return {**base, **overrides}


def extension_request_dict(**overrides) -> dict:
    base = dict(
        requested_months=3,
        requested_at=NOW.isoformat(),
        status="pending",
        approved_at=None,
        new_end_date=datetime(2027, 3, 1, 10, tzinfo=UTC).isoformat(),
    )
    return {**base, **overrides}


def bill_dict(**overrides) -> dict:
    base = dict(
        id=str(BILL_ID),
        user_id=str(CUSTOMER_ID),
        booking_id=str(BOOKING_ID),
        product_id=str(PRODUCT_ID),
        billing_month=7,
        billing_year=2026,
        rental_amount="1000",
        add_ons=[],
        add_on_total="0",
        gst="180.00",
        late_fee="0",
        total_amount="1180.00",
        due_date=(NOW + timedelta(days=35)).isoformat(),
        payment_status="pending",
    )
    return {**base, **overrides}


# ---------------------------------------------------------------------------
# Orders / cart
# ---------------------------------------------------------------------------


def order_dict(**overrides) -> dict:
    base = dict(
        id=str(ORDER_ID),
        user_id=str(CUSTOMER_ID),
        items=[
            dict(
                product_id=str(PRODUCT_ID),
                service_id=None,
                quantity=1,
                price="1000",
                start_date=None,
                end_date=None,
            )
        ],
        total_amount="1000",
        shipping_address=dict(
            address="12 Civil Lines", city="Kanpur", postal_code="208001", country="India"
        ),
        payment_method="card",
        payment_status="pending",
        order_status="processing",
        payment_details=None,
        created_at=NOW.isoformat(),
        updated_at=NOW.isoformat(),
    )
    return {**base, **overrides}


def cart_dict(**overrides) -> dict:
    base = dict(
        id=str(CART_ID),
        user_id=str(CUSTOMER_ID),
        items=[],
        total_amount="0",
        updated_at=NOW.isoformat(),
    )
    return {**base, **overrides}


# ---------------------------------------------------------------------------
# Service requests / KYC
# ---------------------------------------------------------------------------


def service_request_dict(**overrides) -> dict:
    base = dict(
        id=str(SERVICE_REQUEST_ID),
        user_id=str(CUSTOMER_ID),
        booking_id=str(BOOKING_ID),
        product_id=str(PRODUCT_ID),
        type="repair",
        title="Fridge not cooling",
        description="Lower compartment stays warm",
        images=[],
        priority="medium",
        status="open",
        created_at=NOW.isoformat(),
        updated_at=NOW.isoformat(),
    )
    return {**base, **overrides}


def kyc_dict(**overrides) -> dict:
    base = dict(
        id=str(KYC_ID),
        user_id=str(CUSTOMER_ID),
        id_proof=dict(
            type="aadhaar",
            number="1234-5678-9012",
            document_url="/uploads/kyc/id.pdf",
            verified=False,
        ),
        address_proof=dict(
            type="utility_bill", document_url="/uploads/kyc/bill.pdf", verified=False
        ),
        current_address=dict(
            address_line1="12 Civil Lines",
            city="Kanpur",
            state="Uttar Pradesh",
            pincode="208001",
        ),
        status="pending",
        submitted_at=NOW.isoformat(),
    )
    return {**base, **overrides}


# ---------------------------------------------------------------------------
# Request payload factories
# ---------------------------------------------------------------------------


def rental_create_payload(**overrides) -> dict:
    base = dict(
        product_id=str(PRODUCT_ID),
        selected_city="Kanpur",
        selected_tenure=6,
        selected_add_ons=[dict(add_on_id=str(ADD_ON_ID))],
        delivery_address=dict(address_line1="12 Civil Lines", city="Kanpur"),
    )
    return {**base, **overrides}
