"""
Simulated payment gateway used by the lease acquisition workflow.
No external processor is contacted: a charge waits PAYMENT_SIMULATION_DELAY_SECONDS
and then succeeds with a synthesized transaction id.
"""
import asyncio
import logging
import time
from dataclasses import dataclass

from leasehub.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "Simulated Card"

# The prefix records which path produced a payment: SIM_TRANS_<ms> for charges made
# by the server-side lease checkout, SIM_<ms> for payments a client posts directly.
CHECKOUT_TRANSACTION_PREFIX = "SIM_TRANS"
RECORDED_TRANSACTION_PREFIX = "SIM"


@dataclass
class ChargeResult:
    transaction_id: str
    amount: float
    payment_method: str
    status: str = "succeeded"


def synthesize_transaction_id(prefix: str = RECORDED_TRANSACTION_PREFIX) -> str:
    """Timestamp-based transaction id, e.g. SIM_1718000000000 or SIM_TRANS_1718000000000."""
    return f"{prefix}_{int(time.time() * 1000)}"


async def simulate_charge(
    amount: float,
    payment_method: str | None = None,
    transaction_id: str | None = None,
    *,
    delay_seconds: float | None = None,
) -> ChargeResult:
    """
    Stand-in for a gateway round trip.
    Returns a ChargeResult; the caller persists it as a Payment.
    """
    if amount <= 0:
        raise ValueError("Charge amount must be positive")
    delay = settings.PAYMENT_SIMULATION_DELAY_SECONDS if delay_seconds is None else delay_seconds
    if delay > 0:
        await asyncio.sleep(delay)
    result = ChargeResult(
        transaction_id=transaction_id or synthesize_transaction_id(CHECKOUT_TRANSACTION_PREFIX),
        amount=amount,
        payment_method=payment_method or DEFAULT_PAYMENT_METHOD,
    )
    logger.info("Simulated charge of %.2f via %s (%s)", amount, result.payment_method, result.transaction_id)
    return result
