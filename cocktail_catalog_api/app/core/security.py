"""
Authentication helpers.

The API never handles credentials.  Clients sign in against the
hosted auth service and send the resulting access token as
``Authorization: Bearer <token>``; the auth collaborator turns that
token back into a ``UserIdentity``.  The dependencies at the bottom of
this module expose the result to FastAPI routes, either as a required
user (401 when missing) or as an optional viewer.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer


@dataclass(frozen=True)
class UserIdentity:
    """The signed-in user as reported by the auth collaborator."""

    id: str
    email: Optional[str] = None


AuthCallback = Callable[[Optional[UserIdentity]], None]


class AuthCollaborator:
    """Contract for the external auth service.

    ``current_user`` resolves an access token (or, when omitted, the
    collaborator's own session) to a user, returning ``None`` for
    anonymous or invalid credentials.  ``on_auth_change`` registers a
    callback fired with the new user (or ``None`` after sign-out) and
    returns a function that removes the subscription.
    """

    async def current_user(self, access_token: Optional[str] = None) -> Optional[UserIdentity]:
        raise NotImplementedError

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        raise NotImplementedError


security = HTTPBearer(auto_error=False)


def get_auth(request: Request) -> AuthCollaborator:
    """Return the auth collaborator attached to the running application."""
    return request.app.state.backend.auth


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Return the raw bearer token of the request, if any."""
    if credentials is None:
        return None
    return credentials.credentials


async def get_optional_user(
    token: Optional[str] = Depends(get_access_token),
    auth: AuthCollaborator = Depends(get_auth),
) -> Optional[UserIdentity]:
    """Dependency returning the viewer, or ``None`` for anonymous requests.

    A token the auth service rejects is treated the same as no token;
    read-only routes should still render for such viewers.
    """
    if token is None:
        return None
    return await auth.current_user(token)


async def get_current_user(
    token: Optional[str] = Depends(get_access_token),
    user: Optional[UserIdentity] = Depends(get_optional_user),
) -> UserIdentity:
    """Dependency that requires an authenticated user.

    Raises HTTP 401 if the request carries no bearer token or the auth
    service does not recognise it.  The lookup itself is shared with
    ``get_optional_user``, so each request asks the auth service once.
    """
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
