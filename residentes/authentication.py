"""
Token authentication for the legacy ``Authorization: Token <key>`` header.

Kept apart from the login views so that REST framework can import the
class from settings without pulling in view modules.
"""
from __future__ import annotations

import logging

from rest_framework import authentication, exceptions

logger = logging.getLogger(__name__)


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication with Spanish error messages."""

    keyword = 'Token'

    def authenticate_credentials(self, key):
        try:
            return super().authenticate_credentials(key)
        except exceptions.AuthenticationFailed as exc:
            logger.info('token authentication rejected: %s', exc.detail)
            raise exceptions.AuthenticationFailed('Token no válido o usuario inactivo') from exc
