"""Email/password login for the property and company dashboards."""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Email ou senha inválidos"


def _find_login_user(email):
    email = User.objects.normalize_email((email or '').strip())
    return User.objects.filter(email__iexact=email).first()


def authenticate_user(*, email: str, password: str) -> User:
    """
    Check the credentials of a login attempt and stamp ``last_login``.

    The email lookup ignores case and surrounding spaces, matching how
    addresses are stored at registration. An unknown email and a wrong
    password produce the same error so the response does not reveal
    which accounts exist.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Correct password on a deactivated account
    """
    user = _find_login_user(email)
    if user is None or not user.check_password(password):
        logger.warning("Failed login for user %s", user.id if user else None)
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    if not user.is_active:
        logger.warning("Login refused for deactivated user %s", user.id)
        raise InactiveAccountError("Conta desativada")

    update_last_login(None, user)
    logger.info("User %s logged in", user.id)
    return user
