"""
context.py

Collaborators the situation plan view needs besides the plan and the render tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from settings import AppSettings

log = logging.getLogger(__name__)


def _log_alert(message: str) -> None:
    log.warning(message)


def _always_confirm(message: str) -> bool:
    return True


@dataclass
class EditorContext:
    """
    Everything the view reaches for outside its own state.

    Attributes:
        history: Checkpoint store with store(), undo_stack_size(), redo_stack_size()
        settings: Application settings
        alert: Shows a message to the user (blocking in the GUI)
        confirm: Asks the user a yes/no question
    """
    history: object
    settings: AppSettings = field(default_factory=AppSettings)
    alert: Callable[[str], None] = _log_alert
    confirm: Callable[[str], bool] = _always_confirm
