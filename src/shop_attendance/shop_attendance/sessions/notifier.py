from __future__ import annotations

import logging
from typing import Protocol

from ..core.enums import NotifyCategory

logger = logging.getLogger(__name__)

_LEVELS = {
    NotifyCategory.DANGER: logging.ERROR,
    NotifyCategory.WARNING: logging.WARNING,
    NotifyCategory.INFO: logging.INFO,
    NotifyCategory.SUCCESS: logging.INFO,
}


class Notifier(Protocol):
    """Sink for non-blocking user feedback (toasts)."""

    def flash(self, message: str, category: NotifyCategory = NotifyCategory.DANGER) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    def flash(self, message: str, category: NotifyCategory = NotifyCategory.DANGER) -> None:
        logger.log(_LEVELS.get(category, logging.INFO), message, extra={"category": category.value})
