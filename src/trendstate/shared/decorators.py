from __future__ import annotations

import logging
from functools import wraps

from trendstate.domain.model.errors import TrendStateError

_log = logging.getLogger(__name__)


def controller_only(fn):
    """Reject the call unless `caller` is the instance controller.

    The wrapped method must take the caller identity as its first argument
    and the owning object must expose an `access` (AccessControl).
    """

    @wraps(fn)
    def wrapper(self, caller: str, *args, **kwargs):
        self.access.require_controller(caller, fn.__name__)
        return fn(self, caller, *args, **kwargs)

    return wrapper


def logged(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        name = fn.__qualname__
        try:
            res = fn(*args, **kwargs)
        except TrendStateError as e:
            _log.info("%s: rejected -> %s: %s", name, type(e).__name__, e)
            raise
        except Exception:
            _log.exception("%s: error", name)
            raise
        _log.debug("%s: ok -> %s", name, res)
        return res

    return wrapper
