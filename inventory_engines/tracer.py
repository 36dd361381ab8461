"""
inventory_engines.tracer -- ``@traced_engine`` for the pure calculators.

Every call to a decorated engine (stock ledger, unit conversion, bill
totals, tax breakup, amount in words) logs one INVENTORY_ENGINE_TRACE
record carrying:

    engine_name / engine_version   which calculator ran
    input_fingerprint              16 hex chars of SHA-256 over the chosen
                                   arguments, so two runs over the same
                                   bill or movement can be matched in logs
    duration_ms                    wall time of the call
    function                       qualified name of the wrapped function

The decorator never touches the arguments or the return value.  It logs
through the standard ``logging`` module under
``inventory_kernel.engines.tracer`` so the engines package stays free of
kernel imports.

Fingerprint rules:
    - Decimals are normalized: ``Decimal("2.50")`` and ``Decimal("2.5")``
      hash alike.
    - Mapping keys are sorted; lists and tuples keep their order.
    - Dataclasses hash by type name and fields.
    - An argument that was not passed hashes as ``null``.
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

_logger = logging.getLogger("inventory_kernel.engines.tracer")

TRACE_MESSAGE = "INVENTORY_ENGINE_TRACE"


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return str(value.normalize()) if value.is_finite() else str(value)
    if isinstance(value, (bool, int, str)):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        body = ",".join(f"{f.name}:{_render(getattr(value, f.name))}" for f in fields(value))
        return f"{type(value).__name__}({body})"
    if isinstance(value, Mapping):
        pairs = sorted((str(k), v) for k, v in value.items())
        return "{" + ",".join(f"{k}:{_render(v)}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_render(item) for item in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """16-hex-char digest of the named arguments (see module notes)."""
    text = "|".join(f"{name}={_render(arguments.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Wrap an engine function so each call logs an INVENTORY_ENGINE_TRACE.

    ``fingerprint_fields`` names parameters of the wrapped function; they
    are matched whether the caller passes them positionally or by keyword.
    """

    def wrap(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def traced(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                supplied = signature.bind_partial(*args, **kwargs).arguments
                fingerprint = compute_input_fingerprint(fingerprint_fields, supplied)

            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.monotonic() - started) * 1000, 2)

            _logger.info(
                TRACE_MESSAGE,
                extra={
                    "trace_type": TRACE_MESSAGE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": elapsed_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return traced

    return wrap
