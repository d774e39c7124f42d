"""
Fixtures shared by every test module: an app per test user with the
auth, payment gateway and file store dependencies swapped for fakes.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from makeeasy.deps import get_current_user, get_file_store, get_payment_gateway
from makeeasy.errors import register_exception_handlers
from makeeasy.routers import (
    about,
    addons,
    auth,
    banners,
    bookings,
    cart,
    categories,
    kyc,
    locations,
    orders,
    products,
    rentals,
    service_requests,
    services,
)

from .factories import make_admin, make_customer

ROUTERS = (
    auth,
    categories,
    products,
    services,
    addons,
    banners,
    locations,
    about,
    cart,
    orders,
    bookings,
    rentals,
    service_requests,
    kyc,
)

# ---------------------------------------------------------------------------
# Fake collaborators: no gateway HTTP calls, no disk writes
# ---------------------------------------------------------------------------


def _noop_gateway():
    mock = MagicMock()
    mock.key_id = "rzp_test_key"
    mock.create_order = AsyncMock(return_value=None)
    mock.verify_signature = MagicMock(return_value=True)
    return mock


def _noop_file_store():
    mock = MagicMock()
    mock.save = AsyncMock(
        side_effect=lambda file, folder, *args: f"/uploads/{folder}/{file.filename}"
    )
    mock.remove = MagicMock()
    return mock


def _bare_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    for module in ROUTERS:
        app.include_router(module.router)
    return app


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def build_app(current_user, gateway=None, file_store=None) -> FastAPI:
    """
    Fresh FastAPI app with get_current_user overridden to return
    `current_user` unconditionally. Role checks still run on top of it.

    Pass `gateway` / `file_store` to inject custom mocks.
    """
    app = _bare_app()

    async def _user():
        return current_user

    app.dependency_overrides[get_current_user] = _user

    gw = gateway if gateway is not None else _noop_gateway()
    fs = file_store if file_store is not None else _noop_file_store()
    app.dependency_overrides[get_payment_gateway] = lambda: gw
    app.dependency_overrides[get_file_store] = lambda: fs

    return app


# ---------------------------------------------------------------------------
# Reusable client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer_client():
    return TestClient(build_app(make_customer()), raise_server_exceptions=True)


@pytest.fixture()
def admin_client():
    return TestClient(build_app(make_admin()), raise_server_exceptions=True)


@pytest.fixture()
def anon_app():
    """
    Bare app with NO dependency overrides.
    Use this when you want the real auth deps to run so you can assert 401/403.
    """
    return _bare_app()


@pytest.fixture()
def client_factory():
    def _make(current_user, gateway=None, file_store=None) -> TestClient:
        return TestClient(
            build_app(current_user, gateway=gateway, file_store=file_store),
            raise_server_exceptions=True,
        )

    return _make
