# src/shared/common/authentication.py
"""
JWT Authentication

Tokens are issued by the user service; this service only verifies them
and never touches a user table.
"""

import jwt
import logging
from typing import Optional, Dict, Any, List, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ['exp', 'iat', 'sub', 'iss']


class TokenUser:
    """
    Request user built from verified token claims.

    ``id`` is the ``sub`` claim; it is what courses store as
    ``instructor_id``.
    """

    is_active = True
    is_authenticated = True
    is_anonymous = False

    def __init__(self, claims: Dict[str, Any]):
        self.claims = claims
        self.id: str = claims['sub']
        self.email: Optional[str] = claims.get('email')
        self.roles: List[str] = list(claims.get('roles') or [])

    def __str__(self) -> str:
        return f"TokenUser({self.email or self.id})"

    @property
    def pk(self) -> str:
        return self.id

    @property
    def is_instructor(self) -> bool:
        return any(role in settings.INSTRUCTOR_ROLES for role in self.roles)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    ``Authorization: Bearer <token>`` authentication.

    A missing header leaves the request anonymous; a present but invalid
    or expired token fails with 401.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[TokenUser, Dict]]:
        header = authentication.get_authorization_header(request)
        if not header:
            return None

        try:
            scheme, _, token = header.decode('utf-8').partition(' ')
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if scheme.lower() != self.keyword.lower():
            return None

        token = token.strip()
        if not token or ' ' in token:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        claims = self.decode(token)
        return TokenUser(claims), claims

    def decode(self, token: str) -> Dict[str, Any]:
        """Verify signature, expiry and issuer; return the claims."""
        jwt_settings = settings.JWT_SETTINGS
        try:
            return jwt.decode(
                token,
                jwt_settings['VERIFYING_KEY'],
                algorithms=[jwt_settings['ALGORITHM']],
                issuer=jwt_settings['ISSUER'],
                options={'require': REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

    def authenticate_header(self, request: Request) -> str:
        return self.keyword
