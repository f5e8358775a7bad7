"""
Memoized reactive values.

A Signal holds either a constant or a function of other signals. Reading a
function-backed signal recomputes it only if a signal it read last time has
been written since. Writes push dirty flags down to dependents; reads pull
fresh values up. There is exactly one mutator context, so nothing here is
thread-safe.
"""

from __future__ import annotations

import functools
import itertools
import logging
from typing import Any, Callable, Generic, TypeVar

from tween import Task, TimingFunction, ease_in_out_cubic, interpolate, tween

logger = logging.getLogger(__name__)

T = TypeVar("T")

_id_counter = itertools.count(1)

# Computations currently running, innermost last. None marks an untracked read.
_active: list[Signal[Any] | None] = []


class Signal(Generic[T]):
    """
    A reactive value.

    Usage:
        width = Signal(100.0)
        double = Signal(lambda: width() * 2)
        double()          # 200.0, computed
        double()          # 200.0, cached
        width.set(50.0)   # marks double dirty
        double()          # 100.0, recomputed

    Any callable passed to the constructor or to set() is treated as the
    function to derive the value from, so a signal can be rebound to read
    another signal by passing that signal itself.
    """

    def __init__(self, value: T | Callable[[], T], name: str | None = None) -> None:
        self.id = next(_id_counter)
        self.name = name or f"signal#{self.id}"
        self._fn: Callable[[], T] | None = None
        self._value: Any = None
        self._dirty = False
        self._computing = False
        self._sources: set[Signal[Any]] = set()
        self._dependents: set[Signal[Any]] = set()
        self._assign(value)

    def __repr__(self) -> str:
        kind = "computed" if self._fn is not None else "value"
        return f"Signal({self.name!r}, {kind})"

    @property
    def is_computed(self) -> bool:
        return self._fn is not None

    def __call__(self) -> T:
        reader = _active[-1] if _active else None
        if reader is not None:
            reader._sources.add(self)
            self._dependents.add(reader)
        if self._dirty:
            self._recompute()
        return self._value

    def peek(self) -> T:
        """Read the current value without registering a dependency."""
        return untracked(self)

    def set(self, value: T | Callable[[], T]) -> None:
        """Store a constant or rebind to a function, invalidating dependents."""
        if self._fn is None and not callable(value) and value == self._value:
            return
        self._assign(value)
        self._invalidate_dependents()

    def tween(
        self,
        target: T,
        duration: float,
        timing: TimingFunction = ease_in_out_cubic,
    ) -> Task:
        """Task that interpolates this signal from its value at start time to target."""
        start = self.peek()
        yield from tween(duration, lambda t: self.set(interpolate(start, target, t)), timing)

    def _assign(self, value: T | Callable[[], T]) -> None:
        self._unlink_sources()
        if callable(value):
            self._fn = value
            self._value = None
            self._dirty = True
        else:
            self._fn = None
            self._value = value
            self._dirty = False

    def _recompute(self) -> None:
        if self._computing:
            raise RuntimeError(
                f"Cycle detected while computing '{self.name}'\n"
                f"  The value was read again before its own computation finished"
            )
        assert self._fn is not None
        self._unlink_sources()
        self._computing = True
        _active.append(self)
        try:
            self._value = self._fn()
        finally:
            _active.pop()
            self._computing = False
        # Left dirty if the function raised, so the next read retries
        self._dirty = False

    def _unlink_sources(self) -> None:
        for source in self._sources:
            source._dependents.discard(self)
        self._sources.clear()

    def _invalidate_dependents(self) -> None:
        # A dirty node's dependents are already dirty, so the walk stops there
        stack = list(self._dependents)
        while stack:
            node = stack.pop()
            if node._dirty:
                continue
            node._dirty = True
            stack.extend(node._dependents)


def untracked(fn: Callable[[], T]) -> T:
    """Call fn without recording the signals it reads as dependencies."""
    _active.append(None)
    try:
        return fn()
    finally:
        _active.pop()


class computed(Generic[T]):
    """
    Method decorator turning a zero-argument method into a per-instance
    memoized Signal.

    The signal is created on first access and stored in the instance
    __dict__ under the method's name, so later lookups bypass the
    descriptor (the same trick functools.cached_property uses).
    """

    def __init__(self, fn: Callable[[Any], T]) -> None:
        self.fn = fn
        self.attrname: str | None = None
        functools.update_wrapper(self, fn)  # type: ignore[arg-type]

    def __set_name__(self, owner: type, name: str) -> None:
        self.attrname = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        name = self.attrname or self.fn.__name__
        node: Signal[T] = Signal(
            functools.partial(self.fn, instance),
            name=f"{type(instance).__name__}.{name}",
        )
        instance.__dict__[name] = node
        return node
