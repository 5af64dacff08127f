"""Debounced asynchronous validation for search and uniqueness checks."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, Set, TypeVar

LOGGER = logging.getLogger(__name__)

R = TypeVar("R")

DEFAULT_QUIET_PERIOD = 0.5

CheckFunction = Callable[[str], Awaitable[R]]
ResultCallback = Callable[[str, R], None]


class DebounceState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    IN_FLIGHT = "in_flight"


@dataclass
class DebounceSession(Generic[R]):
    """Mutable state owned by a single :class:`DebouncedValidator`."""

    current_input_token: str = ""
    pending_timer: Optional[asyncio.TimerHandle] = None
    latest_accepted_result: Optional[R] = None
    result_accepted: bool = False
    state: DebounceState = DebounceState.IDLE


class DebouncedValidator(Generic[R]):
    """Run ``check`` once input has been quiet and keep only the freshest result.

    Every call to :meth:`input_changed` re-arms the quiet-period timer. When it
    elapses the check runs with the input captured at that moment. A result
    is accepted only if the input still has the same value when the result
    arrives; anything older is dropped. Failures of ``check`` are logged and
    treated as inconclusive.

    Must be driven from the thread running the event loop.
    """

    def __init__(
        self,
        check: CheckFunction[R],
        *,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        on_result: Optional[ResultCallback[R]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if quiet_period < 0:
            raise ValueError("quiet_period must not be negative")
        self._check = check
        self._quiet_period = quiet_period
        self._on_result = on_result
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()
        self.session: DebounceSession[R] = DebounceSession()

    @property
    def state(self) -> DebounceState:
        return self.session.state

    @property
    def current_input(self) -> str:
        return self.session.current_input_token

    @property
    def latest_result(self) -> Optional[R]:
        return self.session.latest_accepted_result

    @property
    def is_validating(self) -> bool:
        return self.session.state is not DebounceState.IDLE

    def input_changed(self, value: str) -> None:
        """Record new input and restart the quiet period."""

        if not value or not value.strip():
            self.reset()
            return

        session = self.session
        self._cancel_timer()
        session.current_input_token = value
        session.result_accepted = False
        session.state = DebounceState.PENDING
        session.pending_timer = self._get_loop().call_later(self._quiet_period, self._timer_elapsed, value)

    def reset(self) -> None:
        """Drop pending work and return to idle without running a check."""

        self._cancel_timer()
        self.session.current_input_token = ""
        self.session.latest_accepted_result = None
        self.session.result_accepted = False
        self.session.state = DebounceState.IDLE

    def close(self) -> None:
        """Reset and cancel checks that are still running."""

        self.reset()
        for task in list(self._tasks):
            task.cancel()

    async def wait_idle(self) -> None:
        """Wait until no timer is armed and no check is running.

        A check that never completes keeps this waiting; callers that need a
        bound should wrap it in :func:`asyncio.wait_for`.
        """

        loop = self._get_loop()
        while self.session.pending_timer is not None or self._tasks:
            if self._tasks:
                await asyncio.wait(set(self._tasks))
            else:
                timer = self.session.pending_timer
                delay = timer.when() - loop.time() if timer is not None else 0
                await asyncio.sleep(max(delay, 0))

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _cancel_timer(self) -> None:
        timer = self.session.pending_timer
        if timer is not None:
            timer.cancel()
            self.session.pending_timer = None

    def _timer_elapsed(self, token: str) -> None:
        session = self.session
        session.pending_timer = None
        if token != session.current_input_token:
            return
        session.state = DebounceState.IN_FLIGHT
        LOGGER.debug("Quiet period elapsed, checking %r", token)
        task = self._get_loop().create_task(self._run_check(token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_check(self, token: str) -> None:
        session = self.session
        try:
            result = await self._check(token)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.warning("Validation check failed for %r; treating as inconclusive", token, exc_info=True)
            if token == session.current_input_token and session.state is DebounceState.IN_FLIGHT:
                session.state = DebounceState.IDLE
            return

        if token != session.current_input_token or session.result_accepted:
            LOGGER.debug("Discarding stale result for %r", token)
            return

        self._cancel_timer()
        session.latest_accepted_result = result
        session.result_accepted = True
        session.state = DebounceState.IDLE
        if self._on_result is not None:
            try:
                self._on_result(token, result)
            except Exception:
                LOGGER.warning("Result callback failed for %r", token, exc_info=True)


def uniqueness_check(
    exists: Callable[[str], Awaitable[bool]],
    *,
    current_value: Optional[str] = None,
    message: str = "This code already exists. Please choose a different code.",
) -> Callable[[str], Awaitable[Optional[str]]]:
    """Adapt an ``exists`` lookup into a check returning a conflict message.

    ``current_value`` is the value already stored on the record being
    edited; it never counts as a conflict.
    """

    async def check(value: str) -> Optional[str]:
        candidate = value.strip()
        if not candidate:
            return None
        if current_value is not None and candidate == current_value:
            return None
        return message if await exists(candidate) else None

    return check


__all__ = [
    "DEFAULT_QUIET_PERIOD",
    "DebounceSession",
    "DebounceState",
    "DebouncedValidator",
    "uniqueness_check",
]
