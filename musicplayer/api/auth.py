"""
Auth Client - Email/password accounts via the Identity Toolkit REST API.
"""
import re
import logging
from typing import Optional

import requests

from ..models import AuthUser
from ..errors import InvalidInput, NetworkFailure, Unauthenticated, UnverifiedAccount
from ..config import AUTH_URL, AUTH_TIMEOUT

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$')

# Provider error codes
CREDENTIAL_ERRORS = {
    'EMAIL_NOT_FOUND',
    'INVALID_PASSWORD',
    'INVALID_LOGIN_CREDENTIALS',
    'USER_DISABLED',
}
INPUT_ERRORS = {
    'EMAIL_EXISTS',
    'INVALID_EMAIL',
    'MISSING_EMAIL',
    'MISSING_PASSWORD',
    'WEAK_PASSWORD',
}


def validate_email(email: str) -> str:
    """Return the trimmed email, or raise InvalidInput."""
    email = (email or '').strip()
    if not EMAIL_PATTERN.match(email):
        raise InvalidInput('Please enter a valid email address')
    return email


class AuthClient:
    """REST client for registration, sign-in and password reset."""

    def __init__(self, api_key: str, base_url: str = AUTH_URL):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.session = requests.Session()
        self.session.headers['Content-Type'] = 'application/json'
        self._user: Optional[AuthUser] = None

    @property
    def current_user(self) -> Optional[AuthUser]:
        """The signed-in (and verified) user, or None."""
        return self._user

    def sign_up(self, email: str, password: str) -> AuthUser:
        """Register an account and send the verification email.

        The account is not signed in; it must be verified first.
        """
        email = validate_email(email)
        self._check_password(password)

        data = self._post('accounts:signUp', {
            'email': email,
            'password': password,
            'returnSecureToken': True,
        })
        user = self._user_from(data, email)
        self._post('accounts:sendOobCode', {
            'requestType': 'VERIFY_EMAIL',
            'idToken': user.id_token,
        })
        logger.info(f'Registered {email}, verification email sent')
        return user

    def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in. Unverified accounts are signed back out immediately."""
        email = validate_email(email)
        self._check_password(password)

        data = self._post('accounts:signInWithPassword', {
            'email': email,
            'password': password,
            'returnSecureToken': True,
        })
        user = self._user_from(data, email)

        lookup = self._post('accounts:lookup', {'idToken': user.id_token})
        users = lookup.get('users') or [{}]
        user.email_verified = bool(users[0].get('emailVerified'))

        if not user.email_verified:
            logger.info(f'Sign-in refused for {email}: email not verified')
            self.sign_out()
            raise UnverifiedAccount('Email not verified')

        self._user = user
        logger.info(f'Signed in as {email}')
        return user

    def send_password_reset(self, email: str):
        """Send a password reset email."""
        email = validate_email(email)
        self._post('accounts:sendOobCode', {
            'requestType': 'PASSWORD_RESET',
            'email': email,
        })
        logger.info(f'Password reset email sent to {email}')

    def sign_out(self):
        """Forget the current user."""
        if self._user:
            logger.info(f'Signed out {self._user.email}')
        self._user = None

    # ============================================
    # HELPERS
    # ============================================

    @staticmethod
    def _check_password(password: str):
        if not password:
            raise InvalidInput('Please enter a password')

    @staticmethod
    def _user_from(data: dict, email: str) -> AuthUser:
        return AuthUser(
            uid=data.get('localId', ''),
            email=data.get('email') or email,
            id_token=data.get('idToken', ''),
            refresh_token=data.get('refreshToken'),
        )

    def _post(self, method: str, body: dict) -> dict:
        """POST to an accounts endpoint and map provider errors."""
        try:
            resp = self.session.post(
                f'{self.base_url}/{method}',
                params={'key': self.api_key},
                json=body,
                timeout=AUTH_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning(f'Auth request {method} failed: {e}')
            raise NetworkFailure(str(e)) from e

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if resp.ok:
            return data if isinstance(data, dict) else {}

        code = self._error_code(data)
        logger.warning(f'Auth {method} rejected: {resp.status_code} {code}')
        if code in CREDENTIAL_ERRORS:
            raise Unauthenticated(code)
        if code in INPUT_ERRORS:
            raise InvalidInput(code)
        raise NetworkFailure(f'{method} failed: {code or resp.status_code}', status=resp.status_code)

    @staticmethod
    def _error_code(data) -> str:
        """Extract 'WEAK_PASSWORD' from 'WEAK_PASSWORD : Password should be...'."""
        if not isinstance(data, dict):
            return ''
        message = (data.get('error') or {}).get('message') or ''
        return message.split(':')[0].strip()
