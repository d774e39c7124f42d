from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from loguru import logger

from makeeasy.crud.users import user_crud
from makeeasy.deps import CurrentUser, get_current_user, get_file_store
from makeeasy.roles import Role
from makeeasy.schemas.common import Envelope, Message
from makeeasy.schemas.user import (
    LoginRequest,
    PasswordUpdate,
    RegisterRequest,
    TokenResponse,
    UserDetailsUpdate,
    UserResponse,
)
from makeeasy.security import create_access_token, hash_password, verify_password
from makeeasy.storage import FileStore

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: UserResponse) -> TokenResponse:
    return TokenResponse(token=create_access_token(user.id), user=user)


@router.post(
    "/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED
)
async def register(payload: RegisterRequest) -> TokenResponse:
    if await user_crud.exists(email=payload.email.lower()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
        )
    user = await user_crud.create_user(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        phone=payload.phone,
        role=payload.role,
    )
    logger.info("Registered user id={} role={}", user.id, user.role)
    return _token_response(user)


async def _authenticate(payload: LoginRequest, error: str) -> UserResponse:
    record = await user_crud.get_record_by_email(payload.email)
    if record is None or not verify_password(payload.password, record.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=error)
    return UserResponse.model_validate(record.model_dump(exclude={"password_hash"}))


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest) -> TokenResponse:
    user = await _authenticate(payload, "Invalid credentials")
    return _token_response(user)


@router.post("/admin/login", response_model=TokenResponse)
async def admin_login(payload: LoginRequest) -> TokenResponse:
    user = await _authenticate(payload, "Invalid admin credentials")
    if user.role != Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin credentials"
        )
    return _token_response(user)


@router.get("/logout", response_model=Message)
async def logout() -> Message:
    # Tokens are stateless; the client drops its copy.
    return Message(message="Logged out")


@router.get("/me", response_model=Envelope[UserResponse])
async def get_me(current_user: CurrentUser = Depends(get_current_user)):
    user = await user_crud.get_by(id=current_user.id)
    return Envelope(data=user)


@router.put("/me", response_model=Envelope[UserResponse])
async def update_details(
    payload: UserDetailsUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    data = payload.model_dump(exclude_unset=True)
    if "email" in data and data["email"] is not None:
        data["email"] = data["email"].lower()
    user = await user_crud.update_by(current_user.id, **data)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return Envelope(data=user)


@router.put("/password", response_model=TokenResponse)
async def update_password(
    payload: PasswordUpdate,
    current_user: CurrentUser = Depends(get_current_user),
) -> TokenResponse:
    record = await user_crud.get_record(current_user.id)
    if record is None or not verify_password(
        payload.current_password, record.password_hash
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )
    await user_crud.set_password(current_user.id, hash_password(payload.new_password))
    user = UserResponse.model_validate(record.model_dump(exclude={"password_hash"}))
    return _token_response(user)


@router.post("/me/profile-image", response_model=Envelope[UserResponse])
async def upload_profile_image(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
    files: FileStore = Depends(get_file_store),
):
    url = await files.save(file, "profiles")
    user = await user_crud.update_by(current_user.id, profile_image=url)
    if user is None:
        files.remove(url)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return Envelope(message="Profile image uploaded", data=user)
