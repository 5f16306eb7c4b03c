"""
undo_commands.py

Checkpoint-based undo/redo for the situation plan, built on QUndoStack.

Each committed change (drag release, add, delete, reorder, property edit,
page change) stores a snapshot of the whole plan; undo and redo restore
the neighbouring snapshot.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Optional

from PyQt6.QtGui import QUndoCommand, QUndoStack

from debug_trace import trace, trace_call


class PlanCheckpointCommand(QUndoCommand):
    """Command that switches the plan between two snapshots."""

    def __init__(self, store: "CheckpointStore", before: Dict[str, Any], after: Dict[str, Any],
                 text: str = "Change", parent=None):
        super().__init__(parent)
        self.store = store
        self.before = before
        self.after = after
        self.setText(text)
        self._first_redo = True

    def undo(self):
        self.store._restore(self.before)

    def redo(self):
        if self._first_redo:
            # The plan already is in the "after" state when the command is pushed
            self._first_redo = False
            return
        self.store._restore(self.after)


class CheckpointStore:
    """
    History of plan snapshots.

    Args:
        plan: The SituationPlan to snapshot
        undo_limit: Maximum number of checkpoints kept
        on_restore: Called after undo/redo replaced the plan contents and
            the stack index has moved
    """

    def __init__(self, plan, undo_limit: int = 100, on_restore: Optional[Callable[[], None]] = None):
        self.plan = plan
        self.on_restore = on_restore
        self.undo_stack = QUndoStack()
        self.undo_stack.setUndoLimit(undo_limit)
        self._current = copy.deepcopy(plan.to_record())

    def store(self, text: str = "Change") -> bool:
        """
        Record the current plan state as a checkpoint.

        Returns:
            False if nothing changed since the previous checkpoint
        """
        snapshot = copy.deepcopy(self.plan.to_record())
        if snapshot == self._current:
            return False
        cmd = PlanCheckpointCommand(self, self._current, snapshot, text)
        self._current = snapshot
        self.undo_stack.push(cmd)
        trace(f"checkpoint '{text}' ({self.undo_stack.count()} on stack)", "HISTORY")
        return True

    @trace_call("HISTORY")
    def undo(self) -> None:
        if self.undo_stack.canUndo():
            self.undo_stack.undo()
            self._notify_restored()

    @trace_call("HISTORY")
    def redo(self) -> None:
        if self.undo_stack.canRedo():
            self.undo_stack.redo()
            self._notify_restored()

    def undo_stack_size(self) -> int:
        return self.undo_stack.index()

    def redo_stack_size(self) -> int:
        return self.undo_stack.count() - self.undo_stack.index()

    def reset(self) -> None:
        """Forget all checkpoints and take the current plan as the base state."""
        self.undo_stack.clear()
        self._current = copy.deepcopy(self.plan.to_record())

    def _restore(self, record: Dict[str, Any]) -> None:
        self.plan.load_record(copy.deepcopy(record))
        self._current = copy.deepcopy(record)

    def _notify_restored(self) -> None:
        # QUndoStack moves its index only after the command ran
        if self.on_restore:
            self.on_restore()
