"""Caller identity supplied by the upstream auth layer.

Token verification happens before requests reach this service; the auth
proxy forwards the verified user id and role as headers. Routes depend on
``get_actor`` and pass the resulting ``Actor`` explicitly into services.
"""
from fastapi import Header, HTTPException

from teamfinder.models import Actor, Role

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"


def get_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    """Dependency returning the authenticated actor, 401 if absent."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        role = Role(x_user_role)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Unknown role: {x_user_role}"
        ) from None
    return Actor(id=x_user_id, role=role)
