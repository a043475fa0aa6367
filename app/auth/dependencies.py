# Caller identity resolved upstream (identity proxy sets the user id header)

from fastapi import Request

from app.config import USER_ID_HEADER
from app.crud.errors import Unauthenticated


def get_current_user_id(request: Request) -> str:
    """
    Resolved user id for the request.

    Credentials are verified by the identity provider in front of this service;
    the core only ever sees the user id. Missing/blank header → 401.
    """
    user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
    if not user_id:
        raise Unauthenticated("Authentication required")
    return user_id
