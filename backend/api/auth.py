"""Dépendances d'autorisation.

Le jeton est émis par l'API principale E-Unify ; ce service ne fait confiance
qu'aux claims ``sub`` et ``role`` qu'il contient.
"""
from __future__ import annotations

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from backend.core import models, security

router = APIRouter()
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_user(token: str = Depends(oauth2_scheme)) -> models.User:
    try:
        payload = security.decode_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Jeton invalide") from exc
    username = payload.get("sub")
    role = payload.get("role") or "user"
    if not username:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Charge utile du jeton invalide")
    if role not in models.ROLE_RANK:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Rôle inconnu")
    return models.User(username=username, role=role)


def require_admin(current_user: models.User = Depends(get_current_user)) -> models.User:
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Autorisations insuffisantes",
        )
    return current_user


@router.get("/me", response_model=models.User)
async def me(current_user: models.User = Depends(get_current_user)) -> models.User:
    return current_user
