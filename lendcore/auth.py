"""Caller authorization — the host passes the authenticated caller explicitly."""
from __future__ import annotations

import logging

from .errors import Unauthorized

logger = logging.getLogger(__name__)


def require_authorization(caller: str, principal: str) -> None:
    """Raise ``Unauthorized`` unless ``caller`` is ``principal``."""
    if not caller or caller != principal:
        logger.warning("Unauthorized call: caller '%s' is not '%s'", caller, principal)
        raise Unauthorized(f"Caller '{caller}' is not authorized to act as '{principal}'")
