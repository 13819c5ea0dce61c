"""
vperp: accounting and pricing core of a vAMM perpetual-futures market.

Collateral ledger, virtual AMM price discovery, funding accrual, single-position
leveraged trading and liquidation, behind one `PerpEngine` instance.
"""

__version__ = "0.1.0"

from vperp.core.perp.errors import PerpError
from vperp.integration import PerpEngine, PerpEngineConfig, TokenLedger
from vperp.state.positions import Direction, Position

# Configure structlog once at import time (quiet by default).
from vperp.logging import configure_structlog

configure_structlog()

__all__ = [
    "Direction",
    "PerpEngine",
    "PerpEngineConfig",
    "PerpError",
    "Position",
    "TokenLedger",
    "__version__",
]
