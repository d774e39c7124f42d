from enum import StrEnum


class Role(StrEnum):
    USER = "user"  # customers: cart, orders, rentals, KYC, service requests
    ADMIN = "admin"  # catalog management, deliveries, verifications
