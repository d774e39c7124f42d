import re
from decimal import Decimal
from enum import StrEnum

from tortoise import fields
from tortoise.exceptions import ValidationError
from tortoise.models import Model
from tortoise.validators import MaxValueValidator, MinValueValidator, RegexValidator

from makeeasy.lifecycle import (
    BookingStatus,
    BookingType,
    DeliveryStatus,
    DepositStatus,
    PaymentStatus,
    RentalStatus,
    ServiceRequestStatus,
    TimeSlot,
    booking_type_for,
)
from makeeasy.pricing import billing_totals
from makeeasy.roles import Role

EMAIL_PATTERN = r"^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,3})+$"


class KycStatus(StrEnum):
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    VERIFIED = "verified"
    REJECTED = "rejected"


class AddOnType(StrEnum):
    DAMAGE_PROTECTION = "damage_protection"
    INSURANCE = "insurance"
    ACCESSORY = "accessory"
    SERVICE_PLAN = "service_plan"


class PaymentMethod(StrEnum):
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    COD = "cod"


class OrderStatus(StrEnum):
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ServiceRequestType(StrEnum):
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    RELOCATION = "relocation"
    SWAP = "swap"
    COMPLAINT = "complaint"
    OTHER = "other"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BillStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    WAIVED = "waived"
    FAILED = "failed"


class BillPaymentMethod(StrEnum):
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    WALLET = "wallet"
    AUTO_DEBIT = "auto_debit"


def _money(**kwargs) -> fields.DecimalField:
    return fields.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class TimestampedModel(Model):
    id = fields.UUIDField(primary_key=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:  # type: ignore
        abstract = True


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


class User(TimestampedModel):
    name = fields.CharField(max_length=50)
    email = fields.CharField(
        max_length=255,
        unique=True,
        validators=[RegexValidator(EMAIL_PATTERN, re.IGNORECASE)],
    )
    phone = fields.CharField(max_length=20, null=True)
    password_hash = fields.CharField(max_length=128)
    role = fields.CharEnumField(Role, default=Role.USER)
    kyc_status = fields.CharEnumField(KycStatus, default=KycStatus.NOT_SUBMITTED)

    date_of_birth = fields.DateField(null=True)
    gender = fields.CharField(max_length=20, default="")
    address = fields.CharField(max_length=500, null=True)
    profile_image = fields.CharField(max_length=500, null=True)

    class Meta:  # type: ignore
        table = "users"


class KYC(TimestampedModel):
    user = fields.OneToOneField("models.User", related_name="kyc")

    # {type, number, document_url, verified}
    id_proof = fields.JSONField()
    # {type, document_url, verified}
    address_proof = fields.JSONField()
    # {address_line1, address_line2, city, state, pincode, landmark}
    current_address = fields.JSONField()

    status = fields.CharEnumField(KycStatus, default=KycStatus.PENDING)
    rejection_reason = fields.TextField(null=True)
    verified_by = fields.ForeignKeyField(
        "models.User", related_name="kyc_reviews", null=True
    )
    verified_at = fields.DatetimeField(null=True)
    submitted_at = fields.DatetimeField()

    class Meta:  # type: ignore
        table = "kyc"
        ordering = ["-submitted_at"]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Category(TimestampedModel):
    name = fields.CharField(max_length=50)
    key = fields.CharField(max_length=50, unique=True)
    icon = fields.CharField(max_length=50)
    path = fields.CharField(max_length=100, unique=True)
    image = fields.CharField(max_length=500, null=True)

    class Meta:  # type: ignore
        table = "categories"


class Product(TimestampedModel):
    title = fields.CharField(max_length=100)
    description = fields.CharField(max_length=500, null=True)
    price = _money(validators=[MinValueValidator(0)])
    location = fields.CharField(max_length=100)
    category = fields.CharField(max_length=100)  # category path
    image_url = fields.CharField(max_length=500, null=True)
    available = fields.BooleanField(default=True)
    featured = fields.BooleanField(default=False)
    specifications = fields.JSONField(default=dict)

    # [{city, deposit, delivery_charge, stock, available,
    #   tenures: [{months, monthly_rent, discount_percent}]}]
    city_pricing = fields.JSONField(default=list)
    early_closure_charge = _money(null=True)

    class Meta:  # type: ignore
        table = "products"
        ordering = ["-created_at"]


class Service(TimestampedModel):
    title = fields.CharField(max_length=100)
    description = fields.CharField(max_length=500)
    icon = fields.CharField(max_length=50)
    image = fields.CharField(max_length=500, null=True)
    price = _money(validators=[MinValueValidator(0)])
    available = fields.BooleanField(default=True)
    featured = fields.BooleanField(default=False)

    class Meta:  # type: ignore
        table = "services"
        ordering = ["-created_at"]


class AddOn(TimestampedModel):
    name = fields.CharField(max_length=100)
    description = fields.TextField()
    type = fields.CharEnumField(AddOnType)
    monthly_charge = _money(validators=[MinValueValidator(0)])
    one_time_charge = _money(default=0, validators=[MinValueValidator(0)])
    coverage = fields.TextField(null=True)
    inclusions = fields.JSONField(default=list)
    exclusions = fields.JSONField(default=list)
    max_coverage_amount = _money(null=True)
    terms = fields.TextField(null=True)
    image_url = fields.CharField(max_length=500, null=True)
    active = fields.BooleanField(default=True)
    display_order = fields.IntField(default=0)

    class Meta:  # type: ignore
        table = "add_ons"
        ordering = ["display_order"]


class Banner(TimestampedModel):
    title = fields.CharField(max_length=100)
    subtitle = fields.CharField(max_length=200, null=True)
    description = fields.CharField(max_length=500, null=True)
    image = fields.CharField(max_length=500)
    link = fields.CharField(max_length=500, null=True)
    button_text = fields.CharField(max_length=50, default="Learn More")
    is_active = fields.BooleanField(default=True)
    display_order = fields.IntField(default=0)

    class Meta:  # type: ignore
        table = "banners"
        ordering = ["display_order", "-created_at"]


class Location(TimestampedModel):
    city = fields.CharField(max_length=100)
    district = fields.CharField(max_length=100)
    state = fields.CharField(max_length=100)
    icon = fields.CharField(max_length=50, default="MapPin")
    is_active = fields.BooleanField(default=True)
    display_order = fields.IntField(default=0)
    is_new = fields.BooleanField(default=False)

    class Meta:  # type: ignore
        table = "locations"
        ordering = ["display_order", "city"]


class About(TimestampedModel):
    mission = fields.JSONField()
    story = fields.JSONField()
    core_values = fields.JSONField(default=list)
    leadership_team = fields.JSONField(default=list)
    blog = fields.JSONField(default=list)
    journey = fields.JSONField(default=list)
    community = fields.JSONField(default=dict)

    class Meta:  # type: ignore
        table = "about"


# ---------------------------------------------------------------------------
# Cart & orders
# ---------------------------------------------------------------------------


class Cart(TimestampedModel):
    user = fields.OneToOneField("models.User", related_name="cart")
    # [{id, product_id, service_id, quantity, price, start_date, end_date}]
    items = fields.JSONField(default=list)
    total_amount = _money(default=0)

    async def save(self, *args, **kwargs) -> None:
        self.total_amount = sum(
            (Decimal(str(i["price"])) * int(i["quantity"]) for i in self.items),
            Decimal("0"),
        )
        await super().save(*args, **kwargs)

    class Meta:  # type: ignore
        table = "carts"


class Order(TimestampedModel):
    user = fields.ForeignKeyField("models.User", related_name="orders")
    # [{product_id, service_id, quantity, price, start_date, end_date}]
    items = fields.JSONField(default=list)
    total_amount = _money()
    shipping_address = fields.JSONField(null=True)
    payment_method = fields.CharEnumField(PaymentMethod, default=PaymentMethod.CARD)
    payment_status = fields.CharEnumField(PaymentStatus, default=PaymentStatus.PENDING)
    order_status = fields.CharEnumField(OrderStatus, default=OrderStatus.PROCESSING)
    gateway_order_id = fields.CharField(max_length=100, null=True)
    payment_details = fields.JSONField(null=True)

    class Meta:  # type: ignore
        table = "orders"
        ordering = ["-created_at"]


# ---------------------------------------------------------------------------
# Bookings & rentals
# ---------------------------------------------------------------------------


class Booking(TimestampedModel):
    user = fields.ForeignKeyField("models.User", related_name="bookings")
    order = fields.ForeignKeyField("models.Order", related_name="bookings", null=True)

    # Exactly one of product / service is set; booking_type follows from it.
    product = fields.ForeignKeyField(
        "models.Product", related_name="bookings", null=True
    )
    service = fields.ForeignKeyField(
        "models.Service", related_name="bookings", null=True
    )
    booking_type = fields.CharEnumField(BookingType, default=BookingType.SERVICE)

    # Rental terms (snapshot at booking time)
    selected_city = fields.CharField(max_length=100, null=True)
    selected_tenure = fields.IntField(null=True, validators=[MinValueValidator(1)])
    monthly_rent = _money(null=True)
    deposit_amount = _money(null=True)
    deposit_status = fields.CharEnumField(DepositStatus, null=True)
    delivery_charge = _money(null=True)
    # [{add_on_id, name, monthly_charge, one_time_charge}]
    selected_add_ons = fields.JSONField(default=list)

    # Delivery
    delivery_address = fields.JSONField(null=True)
    delivery_date = fields.DatetimeField(null=True)
    delivery_time_slot = fields.CharEnumField(TimeSlot, null=True)
    delivery_status = fields.CharEnumField(DeliveryStatus, null=True)

    # Rental lifecycle
    rental_status = fields.CharEnumField(RentalStatus, null=True)
    rental_start_date = fields.DatetimeField(null=True)
    planned_end_date = fields.DatetimeField(null=True)
    actual_end_date = fields.DatetimeField(null=True)
    billing_cycle_start = fields.IntField(
        null=True, validators=[MinValueValidator(1), MaxValueValidator(31)]
    )
    next_billing_date = fields.DatetimeField(null=True)
    # Append-only: [{requested_months, requested_at, status, approved_at, new_end_date}]
    extension_requests = fields.JSONField(default=list)

    early_closure_requested = fields.BooleanField(default=False)
    early_closure_request_date = fields.DatetimeField(null=True)
    early_closure_charge = _money(null=True)

    pickup_scheduled_date = fields.DatetimeField(null=True)
    pickup_time_slot = fields.CharEnumField(TimeSlot, null=True)

    # Common
    start_date = fields.DatetimeField()
    end_date = fields.DatetimeField()
    total_amount = _money()
    payment_status = fields.CharEnumField(PaymentStatus, default=PaymentStatus.PENDING)
    booking_status = fields.CharEnumField(BookingStatus, default=BookingStatus.PENDING)
    customer_name = fields.CharField(max_length=100)
    customer_email = fields.CharField(
        max_length=255, validators=[RegexValidator(EMAIL_PATTERN, re.IGNORECASE)]
    )
    customer_phone = fields.CharField(max_length=20)
    notes = fields.CharField(max_length=500, null=True)
    service_request_ids = fields.JSONField(default=list)

    async def save(self, *args, **kwargs) -> None:
        try:
            self.booking_type = booking_type_for(self.product_id, self.service_id)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        await super().save(*args, **kwargs)

    class Meta:  # type: ignore
        table = "bookings"
        ordering = ["-created_at"]


class ServiceRequest(TimestampedModel):
    user = fields.ForeignKeyField("models.User", related_name="service_requests")
    booking = fields.ForeignKeyField("models.Booking", related_name="service_requests")
    product = fields.ForeignKeyField("models.Product", related_name="service_requests")

    type = fields.CharEnumField(ServiceRequestType)
    title = fields.CharField(max_length=200)
    description = fields.TextField()
    images = fields.JSONField(default=list)
    priority = fields.CharEnumField(Priority, default=Priority.MEDIUM)
    status = fields.CharEnumField(
        ServiceRequestStatus, default=ServiceRequestStatus.OPEN
    )

    assigned_to = fields.ForeignKeyField(
        "models.User", related_name="assigned_service_requests", null=True
    )
    assigned_at = fields.DatetimeField(null=True)
    scheduled_date = fields.DatetimeField(null=True)
    scheduled_time_slot = fields.CharEnumField(TimeSlot, null=True)
    resolution = fields.TextField(null=True)
    resolved_at = fields.DatetimeField(null=True)
    closed_at = fields.DatetimeField(null=True)

    rating = fields.IntField(
        null=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    feedback = fields.TextField(null=True)

    class Meta:  # type: ignore
        table = "service_requests"
        ordering = ["-created_at"]


class MonthlyBilling(TimestampedModel):
    user = fields.ForeignKeyField("models.User", related_name="bills")
    booking = fields.ForeignKeyField("models.Booking", related_name="bills")
    product = fields.ForeignKeyField("models.Product", related_name="bills")

    billing_month = fields.IntField(
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    billing_year = fields.IntField()
    rental_amount = _money(validators=[MinValueValidator(0)])
    # [{add_on_id, name, charge}]
    add_ons = fields.JSONField(default=list)
    add_on_total = _money(default=0)
    gst = _money(default=0)
    late_fee = _money(default=0)
    total_amount = _money(default=0)

    due_date = fields.DatetimeField()
    paid_date = fields.DatetimeField(null=True)
    payment_status = fields.CharEnumField(BillStatus, default=BillStatus.PENDING)
    payment_method = fields.CharEnumField(BillPaymentMethod, null=True)
    transaction_id = fields.CharField(max_length=100, null=True)
    invoice_url = fields.CharField(max_length=500, null=True)
    notes = fields.TextField(null=True)

    async def save(self, *args, **kwargs) -> None:
        self.add_on_total, self.gst, self.total_amount = billing_totals(
            self.rental_amount, self.add_ons, self.late_fee
        )
        await super().save(*args, **kwargs)

    class Meta:  # type: ignore
        table = "monthly_billing"
        ordering = ["-due_date"]
