"""Starting values and multi-step trajectories for the Adams integrator.

A ``k``-step Adams method needs the derivative at ``k`` previous grid points
before it can take its first step. :func:`rk4_starting_values` produces
those points with the classic 4th-order Runge-Kutta method, optionally using
several RK4 substeps per grid interval to keep the starting error well below
the Adams truncation error. :func:`adams_start` turns them into a history,
and :func:`adams_integrate` marches the predictor-corrector over many steps
with ``jax.lax.scan``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from abmjax.config import get_dtype
from abmjax.integrators._types import AdamsTrajectory, CoefficientTable, CorrectorConfig
from abmjax.integrators.adams import adams_step, build_history

logger = logging.getLogger(__name__)


def rk4_starting_values(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    x: ArrayLike,
    y: ArrayLike,
    h: ArrayLike,
    n: int,
    substeps: int = 1,
) -> Array:
    """Compute ``n`` equally spaced trajectory values with RK4.

    The Butcher tableau is the classic one with weights
    ``[1/6, 1/3, 1/3, 1/6]``; each grid interval ``h`` is covered by
    ``substeps`` RK4 steps of size ``h / substeps``.

    Args:
        dynamics: ODE right-hand side ``f(x, y) -> dy/dx``.
        x: Initial abscissa.
        y: Initial value ``y(x)``.
        h: Grid spacing.
        n: Number of values to return, including ``y`` itself.
        substeps: RK4 steps per grid interval.

    Returns:
        jax.Array: Shape ``(n,)`` array with ``ys[i] ~ y(x + i*h)`` and
        ``ys[0] == y``.

    Raises:
        ValueError: If *n* or *substeps* is less than 1.
    """
    if n < 1:
        raise ValueError(f"Number of starting values must be at least 1, got {n}")
    if substeps < 1:
        raise ValueError(f"Number of RK4 substeps must be at least 1, got {substeps}")

    dtype = get_dtype()
    x = jnp.asarray(x, dtype=dtype)
    y = jnp.asarray(y, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)
    dt = h / substeps

    def f(xi, yi):
        return jnp.asarray(dynamics(xi, yi), dtype=dtype)

    def rk4(xi, yi):
        k1 = f(xi, yi)
        k2 = f(xi + 0.5 * dt, yi + 0.5 * dt * k1)
        k3 = f(xi + 0.5 * dt, yi + 0.5 * dt * k2)
        k4 = f(xi + dt, yi + dt * k3)
        return yi + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)

    def body_fn(carry, _):
        xi, yi = carry
        for s in range(substeps):
            yi = rk4(xi + s * dt, yi)
        x_next = xi + h
        return (x_next, yi), yi

    _, ys = jax.lax.scan(body_fn, (x, y), None, length=n - 1)
    return jnp.concatenate([jnp.reshape(y, (1,)), ys])


def adams_start(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    x: ArrayLike,
    y: ArrayLike,
    h: ArrayLike,
    table: CoefficientTable,
    substeps: int = 4,
) -> tuple[Array, Array, Array]:
    """Bootstrap the Adams integrator from a single initial value.

    Computes ``k + 1`` values with :func:`rk4_starting_values`, builds the
    history from the first ``k`` and returns the last as the starting point.

    Args:
        dynamics: ODE right-hand side ``f(x, y) -> dy/dx``.
        x: Initial abscissa.
        y: Initial value ``y(x)``.
        h: Step size.
        table: Coefficient table of order ``k``.
        substeps: RK4 steps per grid interval.

    Returns:
        tuple: ``(x_k, y_k, history)`` where ``x_k = x + k*h``, ``y_k`` is
        the RK4 value there and ``history`` is ready for
        :func:`~abmjax.integrators.adams_step`.
    """
    k = table.order
    logger.debug("Starting order %d Adams integrator with %d RK4 substeps", k, substeps)

    ys = rk4_starting_values(dynamics, x, y, h, k + 1, substeps=substeps)
    history = build_history(dynamics, ys[:k], x, h, table)

    x_k = jnp.asarray(x, dtype=get_dtype()) + k * jnp.asarray(h, dtype=get_dtype())
    return x_k, ys[k], history


def adams_integrate(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    x: ArrayLike,
    y: ArrayLike,
    h: ArrayLike,
    n_steps: int,
    history: ArrayLike,
    table: CoefficientTable,
    config: CorrectorConfig | None = None,
) -> AdamsTrajectory:
    """March the predictor-corrector over ``n_steps`` steps.

    Runs :func:`~abmjax.integrators.adams_step` inside ``jax.lax.scan``.
    Steps whose corrector did not converge are still accepted; inspect
    ``iterations`` to find them. The scanned body is compiled, so values
    match a loop of eager :func:`~abmjax.integrators.adams_step` calls to
    rounding error rather than bit for bit.

    Args:
        dynamics: ODE right-hand side ``f(x, y) -> dy/dx``.
        x: Initial abscissa.
        y: Value at ``x``.
        h: Step size.
        n_steps: Number of steps (static, positive).
        history: Derivative samples at ``x - kh, ..., x - h``.
        table: Coefficient table of order ``k``.
        config: Corrector configuration. Uses default
            :class:`CorrectorConfig` if ``None``.

    Returns:
        AdamsTrajectory: Named tuple with fields:
            - ``x``: Abscissas ``x + h, ..., x + n_steps*h``.
            - ``y``: Corrected values at those abscissas.
            - ``y_predictor``: Adams-Bashforth estimates.
            - ``iterations``: Corrector iterations per step.
            - ``history``: History after the last step.

    Raises:
        ValueError: If *n_steps* is less than 1.

    Examples:
        ```python
        import jax.numpy as jnp
        from abmjax.integrators import ADAMS_12, adams_integrate, adams_start
        decay = lambda x, y: -y
        x0, y0, history = adams_start(decay, 0.0, 1.0, 0.01, ADAMS_12)
        traj = adams_integrate(decay, x0, y0, 0.01, 100, history, ADAMS_12)
        traj.y[-1]  # ~exp(-1.12)
        ```
    """
    if n_steps < 1:
        raise ValueError(f"n_steps must be at least 1, got {n_steps}")
    if config is None:
        config = CorrectorConfig()

    dtype = get_dtype()
    x = jnp.asarray(x, dtype=dtype)
    y = jnp.asarray(y, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)
    history = jnp.asarray(history, dtype=dtype)

    logger.debug(
        "Integrating %d steps with order %d Adams table (max_iterations=%d)",
        n_steps,
        table.order,
        config.max_iterations,
    )

    def body_fn(carry, _):
        xi, yi, hist = carry
        result = adams_step(dynamics, xi, yi, h, hist, table, config)
        x_next = xi + h
        return (
            (x_next, result.y_next, result.history),
            (x_next, result.y_next, result.y_predictor, result.iterations),
        )

    (_x, _y, history_out), (xs, ys, y_predictors, iterations) = jax.lax.scan(
        body_fn, (x, y, history), None, length=n_steps
    )

    return AdamsTrajectory(
        x=xs,
        y=ys,
        y_predictor=y_predictors,
        iterations=iterations,
        history=history_out,
    )
