"""Short-poll watcher that waits for a displayed KHQR code to be paid.

Each checkout attempt gets its own handle. The handle starts ``PENDING`` and
moves exactly once to ``PAID``, ``CANCELLED`` or ``TIMED_OUT``; after that no
further settlement checks are made and late answers are ignored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ...domain.errors import MalformedOracleResponseError, OracleUnavailableError
from ...domain.payment.entities import ConfirmationState
from ...domain.shared import SettlementOracleProtocol

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_TIMEOUT = 180.0

OnPaid = Callable[[str], Awaitable[None]]


class WatchHandle:
    """Caller-side view of one watched payment."""

    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        self.finalize_error: Optional[BaseException] = None
        self._state = ConfirmationState.PENDING
        self._done = asyncio.Event()
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def state(self) -> ConfirmationState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state.is_terminal

    def _transition(self, new_state: ConfirmationState) -> bool:
        """Move out of PENDING. Returns False if a terminal state was already set."""
        if self._state.is_terminal:
            return False
        logger.info(
            "Payment %s: %s -> %s", self.fingerprint, self._state.value, new_state.value
        )
        self._state = new_state
        self._done.set()
        return True

    def cancel(self) -> None:
        """Stop watching. No-op once the handle is terminal."""
        if not self._transition(ConfirmationState.CANCELLED):
            return
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> ConfirmationState:
        """Wait for a terminal state and for any finalize call to finish."""
        await self._done.wait()
        if self._task is not None:
            await asyncio.wait({self._task})
        return self._state


class PaymentConfirmationWatcher:
    """Polls a settlement oracle until a payment settles, is cancelled or times out.

    Polls never overlap: when a check takes longer than ``poll_interval`` the
    ticks that elapsed meanwhile are skipped. ``on_paid`` runs at most once per
    handle, after the transition to ``PAID``.
    """

    def __init__(
        self,
        oracle: SettlementOracleProtocol,
        on_paid: Optional[OnPaid] = None,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self._oracle = oracle
        self._on_paid = on_paid
        self._poll_interval = poll_interval
        self._timeout = timeout

    def start(self, fingerprint: str) -> WatchHandle:
        """Begin polling for ``fingerprint``. Must be called from a running loop."""
        handle = WatchHandle(fingerprint)
        handle._task = asyncio.get_running_loop().create_task(self._run(handle))
        return handle

    def cancel(self, handle: WatchHandle) -> None:
        handle.cancel()

    async def _run(self, handle: WatchHandle) -> None:
        try:
            paid = await asyncio.wait_for(
                self._poll_until_settled(handle), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            handle._transition(ConfirmationState.TIMED_OUT)
            return

        if paid and self._on_paid is not None:
            try:
                await self._on_paid(handle.fingerprint)
            except Exception as e:
                logger.exception("Finalizing payment %s failed", handle.fingerprint)
                handle.finalize_error = e

    async def _poll_until_settled(self, handle: WatchHandle) -> bool:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._poll_interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            if handle.done:
                return False

            settled = await self._check(handle.fingerprint)
            if handle.done:
                logger.debug(
                    "Ignoring late settlement answer for %s", handle.fingerprint
                )
                return False
            if settled:
                return handle._transition(ConfirmationState.PAID)

            next_tick += self._poll_interval
            now = loop.time()
            if now > next_tick:
                skipped = int((now - next_tick) // self._poll_interval) + 1
                next_tick += skipped * self._poll_interval
                logger.debug(
                    "Skipped %d tick(s) for %s while a check was in flight",
                    skipped,
                    handle.fingerprint,
                )

    async def _check(self, fingerprint: str) -> bool:
        try:
            return await self._oracle.check_settled(fingerprint)
        except (OracleUnavailableError, MalformedOracleResponseError) as e:
            logger.warning("Settlement check for %s failed: %s", fingerprint, e)
        except Exception:
            logger.exception("Unexpected error checking settlement for %s", fingerprint)
        return False
