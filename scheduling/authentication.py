"""
Token authentication for the scheduling API.

Kept apart from the views so that DRF can import the authentication
classes during start-up without pulling in models and serializers.
JWT bearer tokens are handled by ``rest_framework_simplejwt`` and are
configured next to this class in ``REST_FRAMEWORK``.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication with the ``Token`` keyword.

    Users without a clinic profile still authenticate here; position
    checks live in :mod:`scheduling.permissions`.
    """

    keyword = 'Token'
