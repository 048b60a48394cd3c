# src/logging/context.py — v1
"""Contextual logging support — attach batch_id, document_id, hyperlink_id to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per batch and per hyperlink task.
_batch_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "batch_id", default=None
)
_document_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document_id", default=None
)
_hyperlink_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "hyperlink_id", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    batch_id: str | None = None
    document_id: str | None = None
    hyperlink_id: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        batch_id=_batch_id.get(),
        document_id=_document_id.get(),
        hyperlink_id=_hyperlink_id.get(),
        step=_step.get(),
    )


def set_batch_context(batch_id: str, document_id: str | None = None) -> None:
    """Set batch-level context (called once per batch run)."""
    _batch_id.set(batch_id)
    _document_id.set(document_id)


def set_hyperlink_context(hyperlink_id: str, step: str | None = None) -> None:
    """Set hyperlink-level context (called inside each validation task)."""
    _hyperlink_id.set(hyperlink_id)
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _batch_id.set(None)
    _document_id.set(None)
    _hyperlink_id.set(None)
    _step.set(None)
