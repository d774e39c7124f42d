from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from makeeasy.context import AppContext
from makeeasy.crud.users import user_crud
from makeeasy.models import KycStatus
from makeeasy.payments import PaymentGateway
from makeeasy.roles import Role
from makeeasy.security import InvalidToken, decode_access_token
from makeeasy.storage import FileStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


@dataclass
class CurrentUser:
    id: UUID
    name: str
    email: str
    phone: str | None = None
    role: Role = Role.USER
    kyc_status: KycStatus = KycStatus.NOT_SUBMITTED

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


async def get_current_user(token: str | None = Depends(oauth2_scheme)) -> CurrentUser:
    """
    Resolves the bearer token to a fresh user row, so role and KYC status
    changes apply on the very next request.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to access this route",
        )
    try:
        user_id = decode_access_token(token)
    except InvalidToken as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)
        ) from None

    user = await user_crud.get_by(id=user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to access this route",
        )
    return CurrentUser(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        role=user.role,
        kyc_status=user.kyc_status,
    )


def require_role(*roles: Role):
    """
    Factory that returns a dependency enforcing one of `roles`.

    Usage:
        @router.get("/protected")
        async def route(user = Depends(require_role(Role.ADMIN))):
            ...
    """

    async def _dep(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"User role {current_user.role} is not authorized "
                    "to access this route"
                ),
            )
        return current_user

    return _dep


require_admin = require_role(Role.ADMIN)


# ---------------------------------------------------------------------------
# App-scoped collaborators
# ---------------------------------------------------------------------------


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_payment_gateway(ctx: AppContext = Depends(get_context)) -> PaymentGateway:
    return ctx.payments


def get_file_store(ctx: AppContext = Depends(get_context)) -> FileStore:
    return ctx.files
