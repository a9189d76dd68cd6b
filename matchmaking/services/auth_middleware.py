from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from matchmaking.config import settings
from matchmaking.services.auth_service import verify_token
from matchmaking.utils.errors import ServiceError


def _claims_for(credentials: HTTPAuthorizationCredentials | None, secret: str, claim: str) -> dict:
    token = credentials.credentials if credentials else None
    try:
        payload = verify_token(token, secret)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    if not payload.get(claim):
        raise HTTPException(status_code=403, detail="Forbidden: Invalid token payload")
    return payload


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(settings.bearer_scheme),
) -> str:
    payload = _claims_for(credentials, settings.JWT_SECRET_KEY, "userId")
    return payload["userId"]


def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(settings.bearer_scheme),
) -> dict:
    payload = _claims_for(credentials, settings.ADMIN_SECRET_KEY, "adminId")
    return {"admin_id": payload["adminId"], "username": payload.get("username")}
