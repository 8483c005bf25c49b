# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Structured logging for relnote.

Configures `structlog <https://www.structlog.org/>`_ with two output modes:

- **Console** (default): human-readable output, colored when stderr
  is a TTY.
- **JSON** (``--json-log``): Machine-readable, one JSON object per line.

Both modes write to stderr so stdout stays clean for machine output
(``relnote classify --json | jq``, the ``bump=`` step output, ...).

Usage::

    from relnote.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger('relnote.pipeline')
    log.info('entry_inserted', category='Fixes', reference_id=55)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
    redact_secrets: bool = True,
) -> None:
    """Configure structlog for relnote.

    Should be called once at startup, before any logging calls.

    Args:
        verbose: Enable debug-level output.
        quiet: Suppress info-level output (only warnings and errors).
        json_log: Use JSON output instead of console output.
        redact_secrets: Scrub token values from log output. Can also be
            disabled via the ``RELNOTE_REDACT_SECRETS=0`` env var.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=level,
        force=True,
    )

    global _secret_values, _redaction_enabled  # noqa: PLW0603
    _redaction_enabled = redact_secrets and os.environ.get('RELNOTE_REDACT_SECRETS', '1') != '0'
    _secret_values = _build_secret_values() if _redaction_enabled else frozenset()

    shared_processors: list[structlog.types.Processor] = [  # type: ignore[assignment]
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_sensitive_values,
    ]

    if json_log:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty() and not _in_github_actions(),
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = 'relnote') -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger.

    Args:
        name: Logger name, used for filtering and identification.

    Returns:
        A :class:`structlog.stdlib.BoundLogger` instance.
    """
    return structlog.get_logger(name)


def _in_github_actions() -> bool:
    """Whether we are running inside a GitHub Actions job."""
    return os.environ.get('GITHUB_ACTIONS', '').lower() == 'true'


# Env vars holding tokens a relnote run can see.
_SENSITIVE_ENV_VARS: tuple[str, ...] = (
    'GITHUB_TOKEN',
    'GH_TOKEN',
    'RELNOTE_TOKEN',
    'ACTIONS_RUNTIME_TOKEN',
    'ACTIONS_ID_TOKEN_REQUEST_TOKEN',
)

_REDACTED = '[REDACTED]'

# Shorter values are never treated as tokens.
_MIN_SECRET_LENGTH = 8

# Set by configure_logging(); extended by register_secret().
_secret_values: frozenset[str] = frozenset()
_redaction_enabled = True


def _build_secret_values() -> frozenset[str]:
    """Tokens currently present in the environment."""
    return frozenset(v for v in (os.environ.get(name, '') for name in _SENSITIVE_ENV_VARS) if v)


def register_secret(value: str) -> None:
    """Redact *value* from every later log line.

    :func:`~relnote.github.github_client` registers the token it is
    given, which covers tokens that never passed through the
    environment (tests, library callers). A no-op when redaction is
    disabled or the value is too short to be a token.
    """
    global _secret_values  # noqa: PLW0603
    if _redaction_enabled and len(value) >= _MIN_SECRET_LENGTH:
        _secret_values = _secret_values | {value}


def _scrub(value: object) -> object:
    if not isinstance(value, str) or not _secret_values:
        return value
    result = value
    for secret in _secret_values:
        if len(secret) >= _MIN_SECRET_LENGTH and secret in result:
            result = result.replace(secret, _REDACTED)
    return result


def redact_sensitive_values(
    logger: Any,  # noqa: ANN401
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that masks tokens in every field.

    Every string value is checked, including ``error`` fields built
    from httpx exceptions.
    """
    if not _secret_values:
        return event_dict
    return {k: _scrub(v) for k, v in event_dict.items()}


__all__ = [
    'configure_logging',
    'get_logger',
    'redact_sensitive_values',
    'register_secret',
]
