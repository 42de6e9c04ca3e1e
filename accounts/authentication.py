from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from core.exceptions import Unauthenticated
from . import session


class BearerAuthentication(BaseAuthentication):
    """
    Builds the request Actor straight from the token claims.

    No header -> anonymous (protected views answer 401 through IsAuthenticated).
    Bad header or bad token -> 401 AuthenticationFailed.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        header = get_authorization_header(request).decode("latin-1")
        if not header:
            return None

        try:
            actor = session.authenticate(header)
        except Unauthenticated as exc:
            raise exceptions.AuthenticationFailed(exc.message, code=exc.reason)

        return (actor, None)

    def authenticate_header(self, request):
        return self.keyword
