"""
canvas/events.py

Pointer input events and listener bookkeeping for the situation plan canvas.

Handlers are objects with a ``handle(event)`` method so they keep their
identity for removal.  Every registration made through an ``EventManager``
returns a ``Disposer`` and all of them are revoked together on ``dispose()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

MOUSE_DOWN = "mousedown"
MOUSE_MOVE = "mousemove"
MOUSE_UP = "mouseup"
TOUCH_START = "touchstart"
TOUCH_MOVE = "touchmove"
TOUCH_END = "touchend"

PRESS_KINDS = (MOUSE_DOWN, TOUCH_START)
MOVE_KINDS = (MOUSE_MOVE, TOUCH_MOVE)
RELEASE_KINDS = (MOUSE_UP, TOUCH_END)

# Move/release kinds that belong to a press kind
FOLLOW_UP_KINDS: Dict[str, tuple] = {
    MOUSE_DOWN: (MOUSE_MOVE, MOUSE_UP),
    TOUCH_START: (TOUCH_MOVE, TOUCH_END),
}


@dataclass
class InputEvent:
    """A pointer event in screen pixels, dispatched to a node or the canvas surface."""
    kind: str
    x: float = 0.0
    y: float = 0.0
    target: Any = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


class InputHandler:
    """Receives input events from an EventTarget."""

    def handle(self, event: InputEvent) -> None:
        raise NotImplementedError


class CallbackHandler(InputHandler):
    """Adapts a plain callable that takes no arguments."""

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback

    def handle(self, event: InputEvent) -> None:
        self.callback()


class EventTarget:
    """Mixin for anything input handlers can be registered on."""

    def __init__(self):
        self._listeners: Dict[str, List[InputHandler]] = {}

    def add_listener(self, kind: str, handler: InputHandler) -> None:
        handlers = self._listeners.setdefault(kind, [])
        if handler not in handlers:
            handlers.append(handler)

    def remove_listener(self, kind: str, handler: InputHandler) -> None:
        handlers = self._listeners.get(kind)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def has_listener(self, kind: str, handler: Optional[InputHandler] = None) -> bool:
        handlers = self._listeners.get(kind, [])
        return handler in handlers if handler is not None else bool(handlers)

    def dispatch(self, event: InputEvent) -> InputEvent:
        """Deliver an event to the handlers registered for its kind."""
        if event.target is None:
            event.target = self
        # Handlers may add or remove listeners while running
        for handler in list(self._listeners.get(event.kind, [])):
            handler.handle(event)
        return event


class Disposer:
    """Token that revokes one listener registration."""

    def __init__(self, target: EventTarget, kind: str, handler: InputHandler):
        self.target = target
        self.kind = kind
        self.handler = handler
        self.disposed = False

    def dispose(self) -> None:
        if not self.disposed:
            self.target.remove_listener(self.kind, self.handler)
            self.disposed = True


class EventManager:
    """Registers listeners and revokes all of them on teardown."""

    def __init__(self):
        self._disposers: List[Disposer] = []

    def add_listener(self, target: EventTarget, kind: str, handler: InputHandler) -> Disposer:
        target.add_listener(kind, handler)
        disposer = Disposer(target, kind, handler)
        self._disposers = [d for d in self._disposers if not d.disposed]
        self._disposers.append(disposer)
        return disposer

    def remove_listener(self, target: EventTarget, kind: str, handler: InputHandler) -> None:
        for disposer in self._disposers:
            if disposer.target is target and disposer.kind == kind and disposer.handler is handler:
                disposer.dispose()
        self._disposers = [d for d in self._disposers if not d.disposed]

    def remove_target(self, target: EventTarget) -> None:
        """Revoke every registration on a target that is going away."""
        for disposer in self._disposers:
            if disposer.target is target:
                disposer.dispose()
        self._disposers = [d for d in self._disposers if not d.disposed]

    def dispose(self) -> None:
        for disposer in self._disposers:
            disposer.dispose()
        self._disposers = []

    def __len__(self) -> int:
        return sum(1 for d in self._disposers if not d.disposed)
