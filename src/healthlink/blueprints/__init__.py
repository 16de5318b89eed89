from __future__ import annotations

import functools
from typing import Optional

from flask import current_app, jsonify, request

from ..errors import HealthLinkError


def _services():
    return current_app.extensions['healthlink']


def get_storage():
    return _services()['storage']


def get_brain():
    return _services()['brain']


def get_maps():
    return _services()['maps']


def json_error(message: str, status: int = 400):
    return jsonify({'error': message}), status


def user_id_arg() -> Optional[str]:
    uid = (request.args.get('userId') or '').strip()
    return uid or None


def dispatch_failed(result, default: str):
    """500 response for a failed AI dispatch; the provider's message is passed through."""
    current_app.logger.warning('%s (provider=%s): %s', default, result.provider, result.error)
    return json_error(result.error or default, 500)


def fails_with(message: str):
    """Turn unexpected exceptions into ``500 {error: message}``.

    ``HealthLinkError`` subclasses propagate to the app-level handler so
    validation and coordinate errors keep their own status codes.
    """
    def decorate(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except HealthLinkError:
                raise
            except Exception:
                current_app.logger.exception(message)
                return json_error(message, 500)
        return wrapper
    return decorate
