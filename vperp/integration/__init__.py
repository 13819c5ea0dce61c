"""
Stateful engine and external collaborators for the vperp market
"""

from .collateral import BoundToken, CollateralAsset, TokenLedger
from .perp_engine import DEFAULT_ENGINE_ADDRESS, PerpEngine, PerpEngineConfig

__all__ = [
    "BoundToken",
    "CollateralAsset",
    "TokenLedger",
    "DEFAULT_ENGINE_ADDRESS",
    "PerpEngine",
    "PerpEngineConfig",
]
