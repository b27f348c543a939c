from __future__ import annotations

import pytest

from platewatch.restaurants.catalog import reset_catalog
from platewatch.sync.aggregate import get_store, get_sync
from platewatch.votes.log import clear_votes


@pytest.fixture(autouse=True)
def _fresh_state():
    reset_catalog()
    clear_votes()
    get_store().clear()
    get_sync().clear()
    yield
