"""
Explicit actor context for service calls.

The mobile client looked the current user up in three places (an
explicit id, the live session, a locally cached id) every time it needed
it.  Here that lookup happens once per request in
:func:`resolve_current_user` and the resulting :class:`ActorContext` is
passed to every service function.

Only a credential DRF accepted (token, JWT or Django session) identifies
the caller.  The id cached in the session at login is a hint that is
confirmed against that credential; on its own it authenticates nobody.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from django.contrib.auth import get_user_model
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

User = get_user_model()

SESSION_USER_KEY = 'residentes.user_id'


@dataclass(frozen=True)
class ActorContext:
    user: User
    # 'explicit', 'request' or 'session'
    source: str

    @property
    def user_id(self) -> int:
        return self.user.id


def resolve_current_user(request, explicit_user_id=None) -> ActorContext:
    """Resolve the acting user: explicit id, then session cache, then request user.

    Every tier requires an authenticated request.  An explicit id is only
    honoured when it names the authenticated user, and a cached session id
    that does not match it is replaced.
    """
    user = getattr(request, 'user', None)
    authenticated = bool(user and getattr(user, 'is_authenticated', False))
    session = getattr(request, 'session', None)

    if not authenticated:
        if session is not None:
            session.pop(SESSION_USER_KEY, None)
        if explicit_user_id not in (None, ''):
            raise PermissionDenied('No puedes actuar en nombre de otro usuario')
        raise NotAuthenticated('Debes iniciar sesión')

    if explicit_user_id not in (None, ''):
        if str(user.id) != str(explicit_user_id):
            raise PermissionDenied('No puedes actuar en nombre de otro usuario')
        return ActorContext(user=user, source='explicit')

    if session is None:
        return ActorContext(user=user, source='request')
    if session.get(SESSION_USER_KEY) == user.id:
        return ActorContext(user=user, source='session')
    session[SESSION_USER_KEY] = user.id
    return ActorContext(user=user, source='request')


def optional_current_user(request) -> Optional[ActorContext]:
    """Like :func:`resolve_current_user` for endpoints open to anonymous callers."""
    try:
        return resolve_current_user(request)
    except NotAuthenticated:
        return None


def context_for(user: User) -> ActorContext:
    """Build a context for code paths that already hold a user (commands, tests)."""
    return ActorContext(user=user, source='explicit')
