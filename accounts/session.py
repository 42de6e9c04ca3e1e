"""
Session codec: actor claims <-> signed bearer token.

Tokens are simplejwt access tokens signed with ``JWT_SECRET`` and valid for
``SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]`` (24 hours). Nothing is stored
server-side; the claims are trusted for the lifetime of one request.
"""
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import Role
from core.exceptions import Unauthenticated


CLAIMS = ("user_id", "company_id", "role", "full_name")


@dataclass(frozen=True)
class Actor:
    """The authenticated identity attached to a request (``request.user``)."""

    id: int
    company_id: int
    role: Role
    full_name: str = ""

    # DRF permission classes check these
    is_authenticated = True
    is_anonymous = False

    @classmethod
    def from_user(cls, user):
        return cls(
            id=user.id,
            company_id=user.company_id,
            role=Role(user.role),
            full_name=user.full_name,
        )

    @classmethod
    def from_claims(cls, claims):
        try:
            return cls(
                id=int(claims["user_id"]),
                company_id=int(claims["company_id"]),
                role=Role(claims["role"]),
                full_name=claims.get("full_name", ""),
            )
        except (KeyError, TypeError, ValueError):
            raise Unauthenticated(Unauthenticated.INVALID)

    def to_claims(self):
        return {
            "user_id": self.id,
            "company_id": self.company_id,
            "role": str(self.role),
            "full_name": self.full_name,
        }


def issue(actor):
    """Sign ``actor``'s claims into a bearer token that expires in 24 hours."""
    if not settings.SIMPLE_JWT.get("SIGNING_KEY"):
        raise ImproperlyConfigured("JWT_SECRET must be set to issue session tokens.")

    token = AccessToken()
    for claim, value in actor.to_claims().items():
        token[claim] = value
    return str(token)


def decode(raw_token):
    try:
        token = AccessToken(raw_token)
    except TokenError:
        raise Unauthenticated(Unauthenticated.INVALID)
    return Actor.from_claims(token.payload)


def authenticate(raw_header):
    """
    Resolve an ``Authorization`` header value into an Actor.

    Missing or malformed header -> Unauthenticated(MISSING);
    expired or unverifiable token -> Unauthenticated(INVALID).
    """
    if not raw_header:
        raise Unauthenticated(Unauthenticated.MISSING)

    parts = raw_header.split()
    if len(parts) != 2 or parts[0] != "Bearer":
        raise Unauthenticated(Unauthenticated.MISSING)

    return decode(parts[1])
