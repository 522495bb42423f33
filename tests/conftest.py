import jax.numpy as jnp
import pytest

from abmjax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    With pytest-xdist, each worker process imports abmjax afresh, but tests
    that switch precision (test_config.py, the low-precision warning tests)
    must not leak their dtype into later tests on the same worker.
    """
    set_dtype(jnp.float64)
