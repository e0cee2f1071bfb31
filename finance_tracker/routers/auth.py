"""Authentication and password reset API endpoints."""

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from finance_tracker.database import get_db
from finance_tracker.dependencies import (
    RESET_COOKIE_NAME,
    clear_reset_cookie,
    clear_session_cookies,
    resolve_current_user,
    set_auth_cookie,
    set_reset_cookie,
)
from finance_tracker.identifiers import InvalidIdentifierError, parse_identifier
from finance_tracker.rate_limit import limiter
from finance_tracker.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SessionStatus,
    UserResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from finance_tracker.services.auth import AuthError, AuthResult, get_auth_service
from finance_tracker.services.jwt import get_jwt_service

router = APIRouter(prefix="/api", tags=["Authentication"])

ERROR_STATUS = {
    AuthError.VALIDATION: 400,
    AuthError.CONFLICT: 409,
    AuthError.INVALID_CREDENTIALS: 401,
    AuthError.INVALID_CODE: 400,
    AuthError.EXPIRED: 400,
    AuthError.UNAUTHORIZED: 401,
}

FORGOT_PASSWORD_MESSAGE = "If an account exists for that email or mobile number, a reset code has been sent."


def _raise_for(result: AuthResult) -> NoReturn:
    raise HTTPException(status_code=ERROR_STATUS.get(result.code, 400), detail=result.error)


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> UserResponse:
    """Register a new user account."""
    auth_service = get_auth_service()
    result = auth_service.register(db, body.username, body.email, body.mobile, body.password)

    if not result.success:
        _raise_for(result)

    return UserResponse(
        id=result.user_id,  # type: ignore[arg-type]
        username=result.username,  # type: ignore[arg-type]
        email=result.email,  # type: ignore[arg-type]
        mobile=result.mobile,  # type: ignore[arg-type]
        is_verified=False,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate and start a session."""
    auth_service = get_auth_service()
    result = auth_service.authenticate(db, body.username, body.password)

    if not result.success:
        _raise_for(result)

    token = get_jwt_service().create_token(user_id=result.user_id, username=result.username)  # type: ignore[arg-type]
    set_auth_cookie(response, token)

    return LoginResponse(message="Login successful.", username=result.username, token=token)  # type: ignore[arg-type]


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """End the session, including any password reset in progress."""
    clear_session_cookies(response)
    return MessageResponse(message="Logged out successfully.")


@router.get("/check-session", response_model=SessionStatus, response_model_exclude_none=True)
def check_session(request: Request) -> SessionStatus:
    """Report whether the caller is logged in."""
    user = resolve_current_user(request)
    if not user:
        return SessionStatus(logged_in=False)
    return SessionStatus(logged_in=True, username=user.username)


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit("3/minute")
def forgot_password(request: Request, body: ForgotPasswordRequest, db: Session = Depends(get_db)) -> MessageResponse:
    """Send a one-time reset code. The response does not reveal whether the account exists."""
    try:
        identifier = parse_identifier(body.identifier)
    except InvalidIdentifierError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    get_auth_service().request_password_reset(db, identifier)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/verify-otp", response_model=VerifyOtpResponse)
@limiter.limit("10/minute")
def verify_otp(
    request: Request, response: Response, body: VerifyOtpRequest, db: Session = Depends(get_db)
) -> VerifyOtpResponse:
    """Verify a reset code and receive a single-use reset token."""
    try:
        identifier = parse_identifier(body.identifier)
    except InvalidIdentifierError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    result = get_auth_service().verify_otp(db, identifier, body.otp_code)
    if not result.success or result.grant is None:
        _raise_for(result)

    grant = result.grant
    set_reset_cookie(response, grant.token, grant.expires_in)
    return VerifyOtpResponse(
        message="Code verified. You may now reset your password.",
        reset_token=grant.token,
        expires_in=grant.expires_in,
    )


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit("5/minute")
def reset_password(
    request: Request, response: Response, body: ResetPasswordRequest, db: Session = Depends(get_db)
) -> MessageResponse:
    """Set a new password using the reset token from the body or the reset cookie."""
    token = body.reset_token or request.cookies.get(RESET_COOKIE_NAME)
    result = get_auth_service().reset_password(db, token, body.password)

    if not result.success:
        _raise_for(result)

    clear_reset_cookie(response)
    return MessageResponse(message="Password has been reset. Please log in with your new password.")
