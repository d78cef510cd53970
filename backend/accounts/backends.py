"""
Login backend accepting a username or an email as ``identifier``.

Registered first in ``settings.AUTHENTICATION_BACKENDS``; the stock
``ModelBackend`` stays behind it for the admin site.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

User = get_user_model()


def find_login_user(identifier: str):
    """
    Return the single user whose username matches ``identifier`` exactly
    or whose email matches it case-insensitively, else ``None``.
    """
    matches = list(
        User.objects.filter(Q(username=identifier) | Q(email__iexact=identifier))[:2]
    )
    return matches[0] if len(matches) == 1 else None


class MultiFieldAuthBackend(ModelBackend):
    """``authenticate(identifier=..., password=...)`` for the JWT login."""

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if not identifier or password is None:
            return None

        user = find_login_user(identifier)
        if user is None:
            # Keep timing comparable to a real password check.
            User().set_password(password)
            return None

        if self.user_can_authenticate(user) and user.check_password(password):
            return user
        return None
