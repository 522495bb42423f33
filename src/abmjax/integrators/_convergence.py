"""Convergence test for the Adams-Moulton fixed-point iteration.

The corrector stops iterating once two successive estimates agree to within
a tolerance that switches between relative and absolute mode:

1. If both estimates exceed 1 in magnitude, the tolerance is relative and
   the bound is ``|y1| * epsilon``.
2. Otherwise the tolerance is absolute and the bound is ``epsilon``.

A pure absolute test never triggers for large solutions and a pure relative
test misbehaves near zero.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from abmjax.config import get_dtype


def has_converged(y0: ArrayLike, y1: ArrayLike, epsilon: float) -> Array:
    """Return whether two successive corrector estimates have converged.

    .. math::

        |y_0 - y_1| < \\begin{cases}
            |y_1| \\, \\epsilon & \\min(|y_0|, |y_1|) > 1 \\\\
            \\epsilon & \\text{otherwise}
        \\end{cases}

    Args:
        y0: Previous estimate.
        y1: New estimate.
        epsilon: Relative tolerance when both estimates exceed 1 in
            magnitude, absolute tolerance otherwise.

    Returns:
        jax.Array: Boolean scalar.

    Examples:
        ```python
        from abmjax.integrators import has_converged
        has_converged(100.0, 100.0 + 1e-7, 1e-6)  # True (relative)
        has_converged(0.5, 0.5 + 1e-5, 1e-6)  # False (absolute)
        ```
    """
    y0 = jnp.asarray(y0, dtype=get_dtype())
    y1 = jnp.asarray(y1, dtype=get_dtype())

    relative = (jnp.abs(y0) > 1.0) & (jnp.abs(y1) > 1.0)
    bound = jnp.where(relative, jnp.abs(y1) * epsilon, epsilon)
    return jnp.abs(y0 - y1) < bound
