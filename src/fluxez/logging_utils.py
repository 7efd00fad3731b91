"""Logging Utilities for the Fluxez SDK

The SDK logs through standard ``logging`` loggers under the ``fluxez``
namespace. Nothing is printed unless the application configures logging or
the client is created with ``debug=True``, which attaches a stdout handler.
"""

import logging
import sys
from collections.abc import Mapping

SDK_LOGGER_NAME = "fluxez"

DEBUG_FORMAT = (
    "%(levelname)s : [%(asctime)s]{module:%(module)s} [Fluxez SDK] :- %(message)s"
)

_REDACTED = "****"

_sdk_logger = logging.getLogger(SDK_LOGGER_NAME)
_sdk_logger.addHandler(logging.NullHandler())


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Mask a secret, keeping a known prefix and the last few characters.

    ``cgx_1234567890abcd`` becomes ``cgx_****abcd``. Short values are fully
    masked.
    """
    if not value:
        return ""
    prefix = ""
    body = value
    if value.lower().startswith("bearer "):
        prefix, body = value[:7], value[7:]
    if "_" in body[:9]:
        head, _, rest = body.partition("_")
        prefix, body = f"{prefix}{head}_", rest
    if len(body) <= visible * 2:
        return f"{prefix}{_REDACTED}"
    return f"{prefix}{_REDACTED}{body[-visible:]}"


def redact_headers(
    headers: Mapping[str, str], sensitive: frozenset[str] | None = None
) -> dict[str, str]:
    """Copy headers with credential values masked, safe for logging."""
    from .constants import HeaderName

    sensitive = sensitive or HeaderName.SENSITIVE
    return {
        name: mask_secret(value) if name.lower() in sensitive else value
        for name, value in headers.items()
    }


class _DebugHandler(logging.StreamHandler):
    """Marker class so ``enable_debug`` never attaches two handlers."""

    pass


class SDKLogger:
    """Debug switch for the SDK loggers."""

    @classmethod
    def enable_debug(cls, stream=None) -> None:
        """Send SDK debug logs to stdout (or ``stream``)."""
        if not any(isinstance(h, _DebugHandler) for h in _sdk_logger.handlers):
            handler = _DebugHandler(stream or sys.stdout)
            handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
            _sdk_logger.addHandler(handler)
        _sdk_logger.setLevel(logging.DEBUG)

    @classmethod
    def disable_debug(cls) -> None:
        for handler in list(_sdk_logger.handlers):
            if isinstance(handler, _DebugHandler):
                _sdk_logger.removeHandler(handler)
        _sdk_logger.setLevel(logging.NOTSET)

    @classmethod
    def is_debug_enabled(cls) -> bool:
        return any(isinstance(h, _DebugHandler) for h in _sdk_logger.handlers)
