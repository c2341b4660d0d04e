from __future__ import annotations

from collections.abc import Iterator

import numpy as np
import pytest

from primordia.util.live_vars import live_variable_registry


@pytest.fixture(autouse=True)
def clear_live_variable_registry() -> Iterator[None]:
    """Clear the global live variable registry before and after each test."""
    live_variable_registry._variables.clear()
    live_variable_registry.strict = False
    yield
    live_variable_registry._variables.clear()
    live_variable_registry.strict = True


@pytest.fixture
def rng() -> np.random.Generator:
    """A fixed-seed generator so sampled positions are reproducible."""
    return np.random.default_rng(1234)
