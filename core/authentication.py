"""
Bearer token authentication for the API.

Clients send ``Authorization: Bearer <access token>`` where the token was
issued by the login endpoint.  Keeping the class in its own module gives
settings a stable import path and avoids circular imports when DRF loads
authentication classes during initialisation.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import RefreshToken


class BearerJWTAuthentication(JWTAuthentication):
    """simplejwt authentication with the project's realm name."""

    www_authenticate_realm = 'mothercare'


def issue_tokens(user) -> RefreshToken:
    """Return a refresh token for ``user`` carrying the profile claims.

    The access token derived from it inherits the same claims.
    """
    refresh = RefreshToken.for_user(user)
    refresh['email'] = user.email
    refresh['role'] = user.role
    refresh['firstName'] = user.first_name or ''
    refresh['lastName'] = user.last_name or ''
    return refresh
