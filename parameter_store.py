"""
Cymatics - Parameter Store
Single source of truth for SimulationParams and DisplayFlags.

Snapshots are replaced, never mutated, so a frame that grabbed the current
snapshot sees consistent values. Subscribers declare the keys they depend on
and are only called when one of those keys changes.
"""

from dataclasses import fields, replace
from typing import Callable, Iterable, Optional

from config import (
    DisplayFlags,
    FieldMode,
    PARAM_RANGE_LIMITS,
    SimulationParams,
    clamp_value,
    coerce_flag,
)
from logging_utils import log_event

Listener = Callable[["ParameterSnapshot", frozenset, str], None]

SOURCE_USER = "user"
SOURCE_AUTO = "auto"
SOURCE_CONFIG = "config"


class ParameterSnapshot:
    """Immutable pairing of params and flags handed to subscribers."""

    __slots__ = ("params", "flags")

    def __init__(self, params: SimulationParams, flags: DisplayFlags):
        self.params = params
        self.flags = flags


def clamp_params(params: SimulationParams) -> SimulationParams:
    """Return a copy with every ranged field inside its documented domain."""
    changes = {name: clamp_value(name, getattr(params, name)) for name in PARAM_RANGE_LIMITS}
    try:
        changes["mode"] = FieldMode(params.mode)
    except ValueError:
        changes["mode"] = FieldMode.CHLADNI
    return replace(params, **changes)


def coerce_flags(flags: DisplayFlags) -> DisplayFlags:
    """Return a copy with every flag as a real bool."""
    return replace(flags, **{f.name: coerce_flag(getattr(flags, f.name)) for f in fields(DisplayFlags)})


class ParameterStore:
    def __init__(self, params: Optional[SimulationParams] = None,
                 flags: Optional[DisplayFlags] = None):
        self._params = clamp_params(params if params is not None else SimulationParams())
        self._flags = coerce_flags(flags if flags is not None else DisplayFlags())
        self._listeners: list[tuple[Listener, Optional[frozenset]]] = []

    @property
    def params(self) -> SimulationParams:
        return self._params

    @property
    def flags(self) -> DisplayFlags:
        return self._flags

    def snapshot(self) -> ParameterSnapshot:
        return ParameterSnapshot(self._params, self._flags)

    def subscribe(self, callback: Listener, keys: Optional[Iterable[str]] = None) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        entry = (callback, frozenset(keys) if keys is not None else None)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def update_params(self, source: str = SOURCE_USER, **changes) -> frozenset:
        """Apply parameter changes (clamped). Returns the keys that actually changed."""
        valid = {f.name for f in fields(SimulationParams)}
        unknown = set(changes) - valid
        if unknown:
            raise KeyError(f"Unknown simulation parameter(s): {sorted(unknown)}")

        candidate = clamp_params(replace(self._params, **changes))
        changed = frozenset(
            name for name in changes
            if getattr(candidate, name) != getattr(self._params, name)
        )
        if not changed:
            return changed
        self._params = candidate
        self._notify(changed, source)
        return changed

    def update_flags(self, source: str = SOURCE_USER, **changes) -> frozenset:
        """Apply flag changes. Returns the keys that actually changed."""
        valid = {f.name for f in fields(DisplayFlags)}
        unknown = set(changes) - valid
        if unknown:
            raise KeyError(f"Unknown display flag(s): {sorted(unknown)}")

        candidate = replace(self._flags, **{k: coerce_flag(v) for k, v in changes.items()})
        changed = frozenset(
            name for name in changes
            if getattr(candidate, name) != getattr(self._flags, name)
        )
        if not changed:
            return changed
        self._flags = candidate
        log_event("DEBUG", "Params", "Flags changed", source=source,
                  **{name: getattr(candidate, name) for name in sorted(changed)})
        self._notify(changed, source)
        return changed

    def _notify(self, changed: frozenset, source: str) -> None:
        snapshot = self.snapshot()
        for callback, keys in list(self._listeners):
            if keys is None or keys & changed:
                callback(snapshot, changed, source)
