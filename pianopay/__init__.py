"""
pianopay — order and payment session orchestration for the piano marketplace.

    from pianopay import pricing as P      # Pure price calculation
    from pianopay import orders as O       # Order API client
    from pianopay import session as S      # Payment session state machine
    from pianopay import persistence as K  # Resumable QR sessions
    from pianopay import present as V      # Display mapping
"""

from pianopay import pricing
from pianopay import orders
from pianopay import session
from pianopay import persistence
from pianopay import present

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "orders",
    "session",
    "persistence",
    "present",
)
