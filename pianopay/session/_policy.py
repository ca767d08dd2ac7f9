"""
Session policy — timing and behaviour configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from pianopay.orders import PaymentMethod

DEFAULT_WINDOW_SECONDS = 3600
"""Progress bar window when the order does not say when it was created."""


@dataclass(frozen=True, slots=True)
class SessionPolicy:
    """
    Payment session configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        policy = (
            SessionPolicy()
            .with_intervals(countdown=1, poll=5)
            .with_methods(PaymentMethod.QR)
        )

    Note: Immutable — each method returns new SessionPolicy.
    """

    countdown_interval: float = 1.0
    poll_interval: float = 5.0
    fallback_window_seconds: int = DEFAULT_WINDOW_SECONDS
    # Consecutive transient poll failures before polling is flagged unreliable.
    poll_failure_threshold: int = 3
    allowed_methods: tuple[PaymentMethod, ...] = (PaymentMethod.COD, PaymentMethod.QR)
    default_method: PaymentMethod = PaymentMethod.COD

    def with_intervals(
        self,
        *,
        countdown: float | None = None,
        poll: float | None = None,
    ) -> SessionPolicy:
        """
        Set ticker intervals in seconds.

        Example:
            .with_intervals(countdown=1, poll=5)
        """
        return replace(
            self,
            countdown_interval=countdown if countdown is not None else self.countdown_interval,
            poll_interval=poll if poll is not None else self.poll_interval,
        )

    def with_fallback_window(self, *, seconds: int) -> SessionPolicy:
        return replace(self, fallback_window_seconds=seconds)

    def with_failure_threshold(self, failures: int) -> SessionPolicy:
        return replace(self, poll_failure_threshold=failures)

    def with_methods(self, *methods: PaymentMethod) -> SessionPolicy:
        """
        Restrict the payment methods offered.

        The first method becomes the default selection.

        Example:
            .with_methods(PaymentMethod.QR)  # course enrolment is QR only
        """
        if not methods:
            raise ValueError("At least one payment method is required")
        return replace(self, allowed_methods=methods, default_method=methods[0])


__all__ = ("SessionPolicy", "DEFAULT_WINDOW_SECONDS")
