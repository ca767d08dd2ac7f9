"""
Payment session — explicit state machine driving one order's payment flow.

The session owns the current step, the order snapshot and two tickers that
only run while in QR:

    countdown  every 1 s: remaining = expiry - now; EXPIRED at zero
    poll       immediately, then every 5 s: GET /orders/{id}/status

Transitions come from the table in `_table.py`. Timer and network events are
scoped to the generation they were issued in, so a late reply from a
superseded session can never move the current one.

    session = S.PaymentSession(api, S.Subject(OrderKind.RENT, "42"), store=bridge)
    session.subscribe(lambda snap: render(snap))

    await session.open()
    await session.confirm(PaymentMethod.QR, rental_start=..., rental_end=...)
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from datetime import date

from kungfu import Result, Ok, Error

from pianopay._clock import Clock, SystemClock
from pianopay.orders import (
    CreateOrderInput,
    Order,
    OrderApi,
    OrderError,
    OrderErrors,
    PaymentMethod,
)
from pianopay.persistence import PendingOrderStore, subject_key
from pianopay.session._events import (
    SCOPED_EVENTS,
    Event,
    Opened,
    Resumed,
    OrderCreated,
    StatusReported,
    CountdownElapsed,
    OrderVanished,
    CancelConfirmed,
    ResetRequested,
    CloseRequested,
)
from pianopay.session._policy import SessionPolicy
from pianopay.session._table import Effect, find_transition
from pianopay.session._ticker import Sleep, Ticker
from pianopay.session._types import SessionSnapshot, Step, Subject

logger = logging.getLogger(__name__)

type Listener = Callable[[SessionSnapshot], None]

COUNTDOWN = "countdown"
POLL = "poll"


class PaymentSession:
    """
    Payment flow controller for one subject.

    Note: Single event loop, no locks. Every mutation happens on the loop in
    response to a user call or a ticker.
    """

    def __init__(
        self,
        api: OrderApi,
        subject: Subject,
        *,
        store: PendingOrderStore | None = None,
        clock: Clock | None = None,
        policy: SessionPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api = api
        self._subject = subject
        self._store = store
        self._clock = clock or SystemClock()
        self._policy = policy or SessionPolicy()
        self._sleep = sleep
        self._key = subject_key(subject.kind, subject.subject_id)

        self._step = Step.CLOSED
        self._generation = 0
        self._method = self._policy.default_method
        self._order: Order | None = None
        self._expected_total: int | None = None
        self._remaining = 0
        self._window = 0
        self._submitting = False
        self._cancelling = False
        self._polling_generation: int | None = None
        self._auth_error = False
        self._poll_failures = 0
        self._last_error: OrderError | None = None
        self._tickers: dict[str, Ticker] = {}
        self._listeners: list[Listener] = []

    # ───────────────────────────────────────────────────────────────────────────
    # State
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def step(self) -> Step:
        return self._step

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def order(self) -> Order | None:
        return self._order

    @property
    def store_key(self) -> str:
        return self._key

    @property
    def timers_running(self) -> bool:
        return any(t.running for t in self._tickers.values())

    @property
    def running_timers(self) -> tuple[str, ...]:
        return tuple(name for name, t in self._tickers.items() if t.running)

    @property
    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            step=self._step,
            subject=self._subject,
            payment_method=self._method,
            allowed_methods=self._policy.allowed_methods,
            order=self._order,
            expected_total=self._expected_total,
            remaining_seconds=self._remaining,
            window_seconds=self._window,
            submitting=self._submitting,
            cancelling=self._cancelling,
            auth_error=self._auth_error,
            poll_failures=self._poll_failures,
            poll_failure_threshold=self._policy.poll_failure_threshold,
            last_error=self._last_error,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with a snapshot after every change. Returns unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ───────────────────────────────────────────────────────────────────────────
    # User actions
    # ───────────────────────────────────────────────────────────────────────────

    async def open(self, pending: Order | None = None) -> Step:
        """
        Open the flow.

        Resumes a QR order still inside its payment window, either the one
        passed in or the one persisted for this subject; otherwise starts at
        SELECT. Opening an already open session is a no-op.
        """
        if self._step is not Step.CLOSED:
            return self._step

        resumable = self._resumable(pending) if pending is not None else await self._load()
        if resumable is not None:
            await self.dispatch(Resumed(resumable))
        else:
            await self.dispatch(Opened())
        return self._step

    def select_method(self, method: PaymentMethod) -> Result[PaymentMethod, OrderError]:
        if self._step is not Step.SELECT:
            return Error(OrderErrors.invalid_state(f"Cannot change payment method in {self._step.value}"))
        if method not in self._policy.allowed_methods:
            return Error(OrderErrors.validation(f"Phương thức thanh toán {method.value} không được hỗ trợ"))
        self._method = method
        self._notify()
        return Ok(method)

    async def confirm(
        self,
        method: PaymentMethod | None = None,
        *,
        rental_start: date | None = None,
        rental_end: date | None = None,
        expected_total: int | None = None,
    ) -> Result[Order, OrderError]:
        """
        Create the order for the selected payment method.

        COD goes straight to SUCCESS; QR enters QR and starts the tickers.
        A failed create leaves the session in SELECT with last_error set.
        """
        if self._step is not Step.SELECT:
            return Error(OrderErrors.invalid_state(f"Cannot confirm in {self._step.value}"))
        if self._submitting:
            return Error(OrderErrors.invalid_state("Đơn hàng đang được xử lý"))

        if method is not None:
            match self.select_method(method):
                case Error(e):
                    self._last_error = e
                    self._notify()
                    return Error(e)
                case Ok(_):
                    pass

        data = CreateOrderInput(
            subject_id=self._subject.subject_id,
            kind=self._subject.kind,
            payment_method=self._method,
            rental_start=rental_start,
            rental_end=rental_end,
        )

        self._submitting = True
        self._last_error = None
        self._expected_total = expected_total
        self._notify()
        try:
            result = await self._api.create_order(data)
        finally:
            self._submitting = False

        match result:
            case Error(e):
                self._last_error = e
                self._notify()
                return Error(e)
            case Ok(order):
                if expected_total is not None and order.total_price != expected_total:
                    logger.warning(
                        "order %s total %d differs from preview %d",
                        order.id, order.total_price, expected_total,
                    )
                if not await self.dispatch(OrderCreated(order)):
                    # Closed while the order was being created
                    if order.is_qr and self._store is not None:
                        await self._store.save(self._key, order)
                    self._notify()
                return Ok(order)

    async def cancel(self) -> Result[None, OrderError]:
        """
        Cancel the pending QR order.

        Single flight: a second call while one is outstanding is rejected.
        On failure the session stays in QR with last_error set.
        """
        if self._step is not Step.QR or self._order is None:
            return Error(OrderErrors.invalid_state(f"Nothing to cancel in {self._step.value}"))
        if self._cancelling:
            return Error(OrderErrors.invalid_state("Đang hủy đơn hàng"))

        generation = self._generation
        order_id = self._order.id
        self._cancelling = True
        self._last_error = None
        self._notify()
        try:
            result = await self._api.cancel_order(order_id)
        finally:
            self._cancelling = False

        match result:
            case Ok(_):
                if not await self.dispatch(CancelConfirmed(generation)):
                    if self._step is Step.CLOSED and self._store is not None:
                        await self._store.clear(self._key)
                    self._notify()
                return Ok(None)
            case Error(e):
                if e.is_auth:
                    self._auth_error = True
                logger.warning("cancel of order %s failed: %s %s", order_id, e.kind.name, e.message)
                self._last_error = e
                self._notify()
                return Error(e)

    async def reset(self) -> Step:
        """Back to SELECT from EXPIRED or CANCELLED."""
        await self.dispatch(ResetRequested())
        return self._step

    async def close(self) -> Step:
        """Close the flow. A QR order stays persisted for resumption."""
        await self.dispatch(CloseRequested())
        return self._step

    # ───────────────────────────────────────────────────────────────────────────
    # Ticker callbacks
    # ───────────────────────────────────────────────────────────────────────────

    async def tick(self) -> None:
        """Countdown tick: refresh remaining seconds, expire locally at zero."""
        if self._step is not Step.QR or self._order is None:
            return

        generation = self._generation
        self._refresh_countdown()
        if self._order.payment_expired_at is not None and self._remaining <= 0:
            await self.dispatch(CountdownElapsed(generation))
            return
        self._notify()

    async def poll(self) -> None:
        """
        Status poll. Never raises; at most one in flight per generation.

        AUTH errors flag polling as unreliable but keep it running, NOT_FOUND
        ends the session, anything else is retried on the next tick.
        """
        if self._step is not Step.QR or self._order is None:
            return

        generation = self._generation
        if self._polling_generation == generation:
            return

        self._polling_generation = generation
        order_id = self._order.id
        try:
            result = await self._api.check_status(order_id)
        finally:
            if self._polling_generation == generation:
                self._polling_generation = None

        if generation != self._generation:
            logger.debug("discarding status of order %s from superseded session", order_id)
            return

        match result:
            case Ok(check):
                self._auth_error = False
                self._poll_failures = 0
                if not await self.dispatch(StatusReported(generation, check)):
                    self._notify()
            case Error(e) if e.is_auth:
                if not self._auth_error:
                    logger.warning("status poll for order %s unauthorized", order_id)
                self._auth_error = True
                self._notify()
            case Error(e) if e.is_terminal:
                await self.dispatch(OrderVanished(generation))
            case Error(e):
                self._poll_failures += 1
                if self._poll_failures == self._policy.poll_failure_threshold:
                    logger.warning(
                        "status poll for order %s failed %d times: %s",
                        order_id, self._poll_failures, e.message,
                    )
                else:
                    logger.debug("status poll for order %s failed: %s", order_id, e.message)
                self._notify()

    # ───────────────────────────────────────────────────────────────────────────
    # Machine
    # ───────────────────────────────────────────────────────────────────────────

    async def dispatch(self, event: Event) -> bool:
        """
        Apply event. Returns True if it caused a transition.

        Scoped events from an older generation and events with no matching
        row are dropped without touching the session.
        """
        if isinstance(event, SCOPED_EVENTS) and event.generation != self._generation:
            logger.debug(
                "dropping stale %s (generation %d, current %d)",
                type(event).__name__, event.generation, self._generation,
            )
            return False

        transition = find_transition(self._step, event)
        if transition is None:
            logger.debug("ignoring %s in %s", type(event).__name__, self._step.value)
            return False

        source = self._step
        self._step = transition.target
        self._generation += 1
        generation = self._generation
        for effect in transition.effects:
            if self._generation != generation:
                # superseded while an effect was suspended
                logger.debug(
                    "%s: %s -> %s on %s superseded",
                    self._key, source.value, transition.target.value, type(event).__name__,
                )
                return True
            await self._apply(effect, event)

        logger.debug(
            "%s: %s -> %s on %s",
            self._key, source.value, self._step.value, type(event).__name__,
        )
        self._notify()
        return True

    async def _apply(self, effect: Effect, event: Event) -> None:
        match effect:
            case Effect.STOP_TIMERS:
                self._stop_timers()
            case Effect.ADOPT_ORDER:
                if isinstance(event, (Resumed, OrderCreated)):
                    self._adopt(event.order)
            case Effect.DROP_ORDER:
                self._drop()
            case Effect.PERSIST:
                if self._store is not None and self._order is not None:
                    await self._store.save(self._key, self._order)
            case Effect.CLEAR_STORE:
                if self._store is not None:
                    await self._store.clear(self._key)
            case Effect.START_TIMERS:
                self._start_timers()

    def _adopt(self, order: Order) -> None:
        self._order = order
        self._method = order.payment_method
        self._auth_error = False
        self._poll_failures = 0
        self._last_error = None
        self._refresh_countdown()

    def _drop(self) -> None:
        self._order = None
        self._method = self._policy.default_method
        self._expected_total = None
        self._remaining = 0
        self._window = 0
        self._auth_error = False
        self._poll_failures = 0
        self._last_error = None

    def _start_timers(self) -> None:
        self._stop_timers()
        self._tickers = {
            COUNTDOWN: Ticker(COUNTDOWN, self._policy.countdown_interval, self.tick, sleep=self._sleep),
            POLL: Ticker(POLL, self._policy.poll_interval, self.poll, sleep=self._sleep),
        }
        for ticker in self._tickers.values():
            ticker.start()

    def _stop_timers(self) -> None:
        for ticker in self._tickers.values():
            ticker.stop()
        self._tickers = {}

    def _refresh_countdown(self) -> None:
        order = self._order
        if order is None or order.payment_expired_at is None:
            self._remaining = 0
            self._window = 0
            return

        expires_at = order.payment_expired_at
        left = (expires_at - self._clock.now()).total_seconds()
        self._remaining = max(0, math.floor(left))

        if order.created_at is not None and expires_at > order.created_at:
            self._window = round((expires_at - order.created_at).total_seconds())
        else:
            self._window = self._policy.fallback_window_seconds

    # ───────────────────────────────────────────────────────────────────────────
    # Resumption
    # ───────────────────────────────────────────────────────────────────────────

    def _resumable(self, order: Order) -> Order | None:
        if not order.is_qr or not order.is_pending or order.payment_expired_at is None:
            return None
        if order.is_expired_at(self._clock.now()):
            return None
        return order

    async def _load(self) -> Order | None:
        if self._store is None:
            return None
        match await self._store.load(self._key):
            case Ok(order) if order is not None:
                return self._resumable(order)
            case Ok(_):
                return None
            case Error(e):
                logger.warning("could not load pending order for %s: %s", self._key, e.message)
                return None

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("session listener failed")


__all__ = ("PaymentSession", "Listener", "COUNTDOWN", "POLL")
