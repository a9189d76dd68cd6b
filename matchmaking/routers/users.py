from fastapi import APIRouter, Depends, status

from matchmaking.database import get_account_service
from matchmaking.schemas.user import (
    GoogleSignIn,
    PasswordResetConfirm,
    PasswordResetRequest,
    SignIn,
    SignUp,
)
from matchmaking.services.account_service import AccountService
from matchmaking.utils.response import create_response, handle_exception

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/sign_up")
def sign_up(body: SignUp, accounts: AccountService = Depends(get_account_service)):
    try:
        user = accounts.sign_up(body.username, body.email, body.password)
        return create_response(
            message="User created successfully",
            data=user.public(),
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/sign_in")
def sign_in(body: SignIn, accounts: AccountService = Depends(get_account_service)):
    try:
        payload = accounts.sign_in(body.email, body.password)
        return create_response(
            message="Signed in successfully",
            data=payload,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/google")
def google_sign_in(body: GoogleSignIn, accounts: AccountService = Depends(get_account_service)):
    try:
        payload = accounts.google_sign_in(body.id_token)
        return create_response(
            message="Google sign-in successful",
            data=payload,
            status_code=status.HTTP_201_CREATED if payload["created"] else status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/password-reset/request")
def request_password_reset(body: PasswordResetRequest, accounts: AccountService = Depends(get_account_service)):
    try:
        accounts.request_password_reset(body.email)
        return create_response(
            message="Password reset email sent",
            data={"email": body.email},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)


@router.post("/password-reset/confirm")
def reset_password(body: PasswordResetConfirm, accounts: AccountService = Depends(get_account_service)):
    try:
        accounts.reset_password(body.token, body.new_password)
        return create_response(
            message="Password updated successfully",
            data=None,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc)
