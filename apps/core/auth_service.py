# apps/core/auth_service.py

"""
Authentication service - accounts and bearer tokens

Keeps registration, credential checks and JWT handling behind one
object so views never touch hashing or token details.
"""

import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils.text import slugify
from jose import JWTError, jwt

from .exceptions import Conflict, NotFound, Unauthorized
from .models import User

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Registration, login and token verification

    Tokens are HS256 JWTs carrying `user_id`, `email` and `exp`.
    """

    # Settings are read on each access so overrides apply
    @property
    def secret(self) -> str:
        return settings.SPRINTBOARD_JWT_SECRET

    @property
    def algorithm(self) -> str:
        return settings.SPRINTBOARD_JWT_ALGORITHM

    @property
    def expires_hours(self) -> int:
        return settings.SPRINTBOARD_JWT_EXPIRES_HOURS

    def register(self, data: Dict) -> Tuple[User, str]:
        """
        Creates an account and returns it with a fresh token

        Args:
            data: cleaned RegisterForm data (email, password, name)

        Raises:
            Conflict: email already registered
        """
        email = data['email'].strip().lower()

        if User.objects.filter(email__iexact=email).exists():
            raise Conflict('Email already registered')

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=self._generate_login(email),
                    email=email,
                    password=data['password'],
                    name=data['name'].strip(),
                )
        except IntegrityError:
            # Concurrent registration with the same email
            raise Conflict('Email already registered')

        logger.info(f"User registered: {user.email}")
        return user, self.issue_token(user)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """Checks credentials and returns the user with a fresh token"""
        user = self._authenticate(email, password)
        if user is None:
            logger.warning(f"Failed login for {email}")
            raise Unauthorized('Invalid credentials')

        return user, self.issue_token(user)

    def get_profile(self, user_id) -> User:
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound('User not found')

    def issue_token(self, user: User) -> str:
        expires = datetime.now(dt_timezone.utc) + timedelta(hours=self.expires_hours)
        claims = {
            'user_id': user.pk,
            'email': user.email,
            'exp': expires,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict:
        """
        Verifies signature and expiry

        Raises:
            Unauthorized: bad signature, malformed or expired token
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise Unauthorized('Invalid or expired token')

        if 'user_id' not in claims:
            raise Unauthorized('Invalid or expired token')
        return claims

    def user_from_token(self, token: str) -> User:
        claims = self.decode_token(token)
        user = User.objects.filter(pk=claims['user_id'], is_active=True).first()
        if user is None:
            raise Unauthorized('Invalid or expired token')
        return user

    def authenticate_request(self, request) -> User:
        """Resolves the user behind an `Authorization: Bearer` header"""
        token = self.extract_bearer_token(request.META.get('HTTP_AUTHORIZATION', ''))
        if not token:
            raise Unauthorized('Authentication required')
        return self.user_from_token(token)

    @staticmethod
    def extract_bearer_token(header: str) -> Optional[str]:
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return None
        return parts[1]

    # =================== PRIVATE ===================

    def _authenticate(self, email: str, password: str) -> Optional[User]:
        user = User.objects.filter(email__iexact=(email or '').strip()).first()
        if user is None or not user.is_active:
            return None
        if not user.check_password(password):
            return None
        return user

    def _generate_login(self, email: str) -> str:
        """Unique login handle derived from the email local part"""
        base = slugify(email.split('@')[0])[:30] or 'user'
        candidate = base
        counter = 1
        while User.objects.filter(username=candidate).exists():
            counter += 1
            candidate = f"{base}{counter}"
        return candidate


# Service singleton
auth_service = AuthenticationService()
