"""Password reset service."""

from datetime import timedelta
import logging
import secrets

from django.conf import settings
from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import UserNotFoundError, InvalidTokenError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def request_password_reset(*, email: str) -> str:
    """
    Generate a password reset token for an active user.

    Returns:
        Reset token

    Raises:
        UserNotFoundError: If no active user has this email
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(email__iexact=email, is_active=True)
        )
    except User.DoesNotExist:
        raise UserNotFoundError(f"No active user with email: {email}")

    reset_token = secrets.token_urlsafe(32)
    user.reset_token = reset_token
    user.reset_token_created_at = timezone.now()
    user.save(update_fields=['reset_token', 'reset_token_created_at'])

    # TODO: deliver the token by email once an SMTP backend is configured
    logger.info("Password reset requested for user %s", user.id)

    return reset_token


@transaction.atomic
def confirm_password_reset(*, token: str, new_password: str) -> User:
    """
    Reset user password with token.

    Tokens expire after ``settings.PASSWORD_RESET_TIMEOUT`` seconds.

    Raises:
        InvalidTokenError: If token is invalid or expired
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(reset_token=token, is_active=True)
        )
    except User.DoesNotExist:
        raise InvalidTokenError("Token inválido ou expirado")

    max_age = timedelta(seconds=settings.PASSWORD_RESET_TIMEOUT)
    if user.reset_token_created_at and timezone.now() - user.reset_token_created_at > max_age:
        raise InvalidTokenError("Token inválido ou expirado")

    user.set_password(new_password)
    user.reset_token = None
    user.reset_token_created_at = None
    user.save(update_fields=['password', 'reset_token', 'reset_token_created_at'])

    return user
