"""
Status enums and transition tables for the three lifecycles a rental touches:
delivery, the rental itself, and the service requests raised against it.

Every status change that has a rule goes through `transition()`. Admin
"direct set" operations (see routers/rentals.py) bypass the tables on purpose
and write the requested value as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class BookingType(StrEnum):
    RENTAL = "rental"
    SERVICE = "service"


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class DepositStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    ADJUSTED = "adjusted"


class DeliveryStatus(StrEnum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED = "failed"


class RentalStatus(StrEnum):
    PENDING_DELIVERY = "pending_delivery"
    ACTIVE = "active"
    PAUSED = "paused"
    EXTENDED = "extended"
    PENDING_PICKUP = "pending_pickup"
    RETURNED = "returned"
    CLOSED = "closed"


class ExtensionStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ServiceRequestStatus(StrEnum):
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class TimeSlot(StrEnum):
    MORNING = "09:00-12:00"
    AFTERNOON = "12:00-15:00"
    EVENING = "15:00-18:00"
    NIGHT = "18:00-21:00"


# Rentals a service request may be raised against
SERVICEABLE_RENTAL_STATUSES = frozenset(
    {RentalStatus.ACTIVE, RentalStatus.PAUSED, RentalStatus.EXTENDED}
)


# ---------------------------------------------------------------------------
# Transition tables
# ---------------------------------------------------------------------------


class TransitionRejected(Exception):
    """Raised when an action is not allowed from the current state."""

    def __init__(self, action: str, current: str, message: str | None = None):
        self.action = action
        self.current = current
        self.message = message or f"Cannot {action} when status is '{current}'"
        super().__init__(self.message)


@dataclass(frozen=True)
class Transition:
    target: str
    # None means the action is allowed from any state
    sources: frozenset[str] | None = None
    message: str | None = None


class DeliveryAction(StrEnum):
    SCHEDULE = "schedule"


class RentalAction(StrEnum):
    PAUSE = "pause"
    RESUME = "resume"
    REQUEST_EARLY_CLOSURE = "request_early_closure"
    SCHEDULE_PICKUP = "schedule_pickup"
    APPROVE_EXTENSION = "approve_extension"


class ServiceRequestAction(StrEnum):
    ASSIGN = "assign"
    SCHEDULE_VISIT = "schedule_visit"
    START = "start"
    RESOLVE = "resolve"
    CLOSE = "close"
    CANCEL = "cancel"


DELIVERY_TRANSITIONS: dict[str, Transition] = {
    DeliveryAction.SCHEDULE: Transition(DeliveryStatus.SCHEDULED),
}

RENTAL_TRANSITIONS: dict[str, Transition] = {
    RentalAction.PAUSE: Transition(
        RentalStatus.PAUSED,
        frozenset({RentalStatus.ACTIVE}),
        "Can only pause active rentals",
    ),
    RentalAction.RESUME: Transition(
        RentalStatus.ACTIVE,
        frozenset({RentalStatus.PAUSED}),
        "Can only resume paused rentals",
    ),
    RentalAction.REQUEST_EARLY_CLOSURE: Transition(
        RentalStatus.PENDING_PICKUP,
        frozenset({RentalStatus.ACTIVE}),
        "Early closure not allowed yet. Minimum tenure must be completed.",
    ),
    RentalAction.SCHEDULE_PICKUP: Transition(RentalStatus.PENDING_PICKUP),
    RentalAction.APPROVE_EXTENSION: Transition(RentalStatus.EXTENDED),
}

_LIVE_TICKET = frozenset(
    {
        ServiceRequestStatus.OPEN,
        ServiceRequestStatus.ASSIGNED,
        ServiceRequestStatus.IN_PROGRESS,
    }
)

SERVICE_REQUEST_TRANSITIONS: dict[str, Transition] = {
    ServiceRequestAction.ASSIGN: Transition(
        ServiceRequestStatus.ASSIGNED, _LIVE_TICKET
    ),
    ServiceRequestAction.SCHEDULE_VISIT: Transition(
        ServiceRequestStatus.IN_PROGRESS, _LIVE_TICKET
    ),
    ServiceRequestAction.START: Transition(
        ServiceRequestStatus.IN_PROGRESS,
        frozenset({ServiceRequestStatus.ASSIGNED, ServiceRequestStatus.IN_PROGRESS}),
        "Please assign the request first",
    ),
    ServiceRequestAction.RESOLVE: Transition(
        ServiceRequestStatus.RESOLVED, _LIVE_TICKET
    ),
    ServiceRequestAction.CLOSE: Transition(
        ServiceRequestStatus.CLOSED,
        frozenset({ServiceRequestStatus.RESOLVED}),
        "Can only close resolved service requests",
    ),
    ServiceRequestAction.CANCEL: Transition(
        ServiceRequestStatus.CANCELLED,
        frozenset({ServiceRequestStatus.OPEN, ServiceRequestStatus.ASSIGNED}),
        "Can only cancel open or assigned service requests",
    ),
}


def transition(table: dict[str, Transition], current: str, action: str) -> str:
    """State `action` leads to from `current`. Raises TransitionRejected."""
    rule = table.get(action)
    if rule is None:
        raise TransitionRejected(action, current, f"Unknown action '{action}'")
    if rule.sources is not None and current not in rule.sources:
        raise TransitionRejected(action, current, rule.message)
    return rule.target


def booking_type_for(product_id: UUID | None, service_id: UUID | None) -> BookingType:
    """A booking references exactly one of product or service; the type follows."""
    if product_id is None and service_id is None:
        raise ValueError("Either product or service must be provided")
    if product_id is not None and service_id is not None:
        raise ValueError("Cannot book both product and service together")
    return BookingType.RENTAL if product_id is not None else BookingType.SERVICE
