from __future__ import annotations

import pytest

from market_helpers import Market, make_market


@pytest.fixture
def market() -> Market:
    return make_market()
