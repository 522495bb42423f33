"""Adams-Bashforth-Moulton predictor-corrector integrator.

Implements a fixed-step, fixed-order predictor-corrector pair for the scalar
ODE ``y' = f(x, y)``. A single generic implementation serves every order;
the order and the weights come from a
:class:`~abmjax.integrators.CoefficientTable`.

Each step:

1. Evaluates ``f(x, y)`` and appends it to the derivative history, dropping
   the oldest sample.
2. Predicts ``y(x + h)`` with the explicit Adams-Bashforth formula.
3. Refines the prediction with the implicit Adams-Moulton formula by
   fixed-point iteration, stopping on convergence or when the iteration
   budget runs out.

The history is an array of shape ``(k,)`` holding ``f`` at the ``k`` grid
points preceding the current abscissa, oldest first. It is never modified in
place; :func:`adams_step` returns the shifted history in its result.

The weighted sums are unrolled in weight order at trace time rather than
computed with a reduction. Called eagerly, :func:`adams_step` therefore
reproduces the classical double-precision reference loop bit for bit,
iteration counts included. Under ``jax.jit`` or ``jax.lax.scan`` XLA fuses
the multiply-add chain, so compiled results agree with the eager ones only
to rounding error (a few ulps, growing with the size of the weights).

All functions are compatible with ``jax.jit`` and ``jax.vmap`` provided the
coefficient table and iteration budget are closed over (static).
"""

from __future__ import annotations

from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from abmjax.config import get_corrector_tolerance, get_dtype
from abmjax.integrators._convergence import has_converged
from abmjax.integrators._types import AdamsStepResult, CoefficientTable, CorrectorConfig


def _as_history(history: ArrayLike, table: CoefficientTable) -> Array:
    dtype = get_dtype()
    largest = max(abs(w) for w in table.bashforth + table.moulton)
    if largest > float(jnp.finfo(dtype).max):
        raise ValueError(
            f"Order {table.order} Adams weights (up to {largest:.3e}) overflow "
            f"{jnp.dtype(dtype).name}; use set_dtype(jnp.float64)"
        )

    history = jnp.asarray(history, dtype=dtype)
    if history.shape != (table.order,):
        raise ValueError(
            f"History must have shape ({table.order},) for an order "
            f"{table.order} Adams table, got {history.shape}"
        )
    return history


def adams_bashforth_predict(
    y: ArrayLike,
    h: ArrayLike,
    history: ArrayLike,
    table: CoefficientTable,
) -> Array:
    """Compute the explicit Adams-Bashforth estimate of ``y(x + h)``.

    .. math::

        y_{i+1} = y_i + h \\, d \\sum_{j=0}^{k-1} b_j \\, f_{i-j}

    Args:
        y: Value at the current abscissa ``x``.
        h: Step size.
        history: Derivative samples at ``x - (k-1)h, ..., x``, oldest first.
            The last entry is the derivative at the current point.
        table: Coefficient table of order ``k``.

    Returns:
        jax.Array: Predicted value at ``x + h``.

    Raises:
        ValueError: If *history* does not have shape ``(k,)`` or the table
            weights overflow the configured dtype.
    """
    dtype = get_dtype()
    y = jnp.asarray(y, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)
    history = _as_history(history, table)

    k = table.order
    delta = jnp.asarray(0.0, dtype=dtype)
    for j in range(k):
        delta = delta + table.bashforth[j] * history[k - 1 - j]

    return y + h * table.divisor * delta


def adams_moulton_correct(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    y_prev: ArrayLike,
    y_estimate: ArrayLike,
    x: ArrayLike,
    h: ArrayLike,
    history: ArrayLike,
    table: CoefficientTable,
    tolerance: float | None = None,
    max_iterations: int = 10,
) -> tuple[Array, Array]:
    """Refine an estimate of ``y(x)`` with the Adams-Moulton corrector.

    Iterates

    .. math::

        y^{(n+1)} = y_{\\text{prev}} + h \\, d \\left( m_0 f(x, y^{(n)})
            + \\sum_{j=1}^{k-1} m_j f_{x-jh} \\right)

    starting from ``y_estimate`` until two successive iterates pass
    :func:`~abmjax.integrators.has_converged` or ``max_iterations``
    iterations have run. The historical sum is computed once.

    Uses ``jax.lax.while_loop``, so it is not reverse-mode differentiable.

    Args:
        dynamics: ODE right-hand side ``f(x, y) -> dy/dx``.
        y_prev: Value at ``x - h``.
        y_estimate: Initial estimate of ``y(x)``, typically the
            Adams-Bashforth prediction.
        x: Abscissa being solved for.
        h: Step size.
        history: Derivative samples at ``x - kh, ..., x - h``, oldest first.
            Only the newest ``k - 1`` samples are used.
        table: Coefficient table of order ``k``.
        tolerance: Convergence tolerance. Defaults to
            :func:`~abmjax.config.get_corrector_tolerance`.
        max_iterations: Iteration budget.

    Returns:
        tuple: ``(y, iterations)``. ``iterations`` is the 1-based index of
        the iteration that converged, or ``max_iterations + 1`` if none did,
        in which case ``y`` is the last iterate. With ``max_iterations == 0``
        no iteration runs, ``y`` equals ``y_estimate`` and ``iterations`` is 1.

    Raises:
        ValueError: If *history* does not have shape ``(k,)`` or the table
            weights overflow the configured dtype.
    """
    if tolerance is None:
        tolerance = get_corrector_tolerance()

    dtype = get_dtype()
    y_prev = jnp.asarray(y_prev, dtype=dtype)
    y_estimate = jnp.asarray(y_estimate, dtype=dtype)
    x = jnp.asarray(x, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)
    history = _as_history(history, table)

    k = table.order
    delta = jnp.asarray(0.0, dtype=dtype)
    for j in range(1, k):
        delta = delta + table.moulton[j] * history[k - j]

    scale = h * table.divisor

    # Carry: (count, converged, estimate)
    def cond_fn(carry):
        count, converged, _y = carry
        return (~converged) & (count < max_iterations)

    def body_fn(carry):
        count, _converged, y_old = carry
        slope = jnp.asarray(dynamics(x, y_old), dtype=dtype)
        y_new = y_prev + scale * (table.moulton[0] * slope + delta)
        return (count + 1, has_converged(y_old, y_new, tolerance), y_new)

    init_carry = (
        jnp.asarray(0, dtype=jnp.int32),
        jnp.asarray(False),
        y_estimate,
    )
    count, converged, y_out = jax.lax.while_loop(cond_fn, body_fn, init_carry)

    iterations = jnp.where(converged, count, count + 1)
    return y_out, iterations


def adams_step(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    x: ArrayLike,
    y: ArrayLike,
    h: ArrayLike,
    history: ArrayLike,
    table: CoefficientTable,
    config: CorrectorConfig | None = None,
) -> AdamsStepResult:
    """Advance the solution by one Adams-Bashforth-Moulton step.

    Evaluates ``f(x, y)`` once, shifts it into the history, predicts
    ``y(x + h)`` and corrects the prediction. The history shift is part of
    the result whether or not the corrector converged.

    Args:
        dynamics: ODE right-hand side ``f(x, y) -> dy/dx``.
        x: Current abscissa.
        y: Value at ``x``.
        h: Step size.
        history: Derivative samples at ``x - kh, ..., x - h``, oldest first.
            Build it with :func:`build_history` or take it from the previous
            step's result.
        table: Coefficient table of order ``k``.
        config: Corrector configuration. Uses default
            :class:`CorrectorConfig` if ``None``.

    Returns:
        AdamsStepResult: Named tuple with fields:
            - ``y_next``: Corrected value at ``x + h``.
            - ``y_predictor``: Adams-Bashforth estimate at ``x + h``.
            - ``history``: History for the next step.
            - ``iterations``: Corrector iterations used.
            - ``converged``: ``iterations <= config.max_iterations``.

    Raises:
        ValueError: If *history* does not have shape ``(k,)`` or the table
            weights overflow the configured dtype.

    Examples:
        ```python
        import jax.numpy as jnp
        from abmjax.integrators import ADAMS_12, adams_step, build_history
        h = 0.01
        xs = -h * jnp.arange(12, 0, -1)
        history = build_history(lambda x, y: y, jnp.exp(xs), xs[0], h)
        result = adams_step(lambda x, y: y, 0.0, 1.0, h, history, ADAMS_12)
        result.y_next  # ~exp(0.01)
        ```
    """
    if config is None:
        config = CorrectorConfig()

    dtype = get_dtype()
    x = jnp.asarray(x, dtype=dtype)
    y = jnp.asarray(y, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)
    history = _as_history(history, table)

    slope = jnp.asarray(dynamics(x, y), dtype=dtype)
    history = jnp.concatenate([history[1:], jnp.reshape(slope, (1,))])

    y_predictor = adams_bashforth_predict(y, h, history, table)
    y_next, iterations = adams_moulton_correct(
        dynamics,
        y,
        y_predictor,
        x + h,
        h,
        history,
        table,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
    )

    return AdamsStepResult(
        y_next=y_next,
        y_predictor=y_predictor,
        history=history,
        iterations=iterations,
        converged=iterations <= config.max_iterations,
    )


def build_history(
    dynamics: Callable[[ArrayLike, ArrayLike], Array],
    ys: ArrayLike,
    x: ArrayLike,
    h: ArrayLike,
    table: CoefficientTable | None = None,
) -> Array:
    """Build the initial derivative history from known trajectory values.

    Given ``ys[i] = y(x + i*h)`` for ``i = 0..k-1``, returns
    ``[f(x, ys[0]), f(x + h, ys[1]), ..., f(x + (k-1)h, ys[k-1])]``. The first
    :func:`adams_step` using this history starts at ``x + k*h``.

    Args:
        dynamics: ODE right-hand side ``f(x, y) -> dy/dx``.
        ys: Known values at ``k`` equally spaced abscissas.
        x: Abscissa of ``ys[0]``.
        h: Spacing of the abscissas.
        table: Optional coefficient table. When given, ``len(ys)`` must
            equal its order.

    Returns:
        jax.Array: Derivative history of shape ``(len(ys),)``.

    Raises:
        ValueError: If *ys* is not one-dimensional or its length does not
            match *table*.
    """
    dtype = get_dtype()
    ys = jnp.asarray(ys, dtype=dtype)
    xi = jnp.asarray(x, dtype=dtype)
    h = jnp.asarray(h, dtype=dtype)

    if ys.ndim != 1:
        raise ValueError(f"Trajectory values must be one-dimensional, got shape {ys.shape}")
    if table is not None and ys.shape[0] != table.order:
        raise ValueError(
            f"Expected {table.order} trajectory values for an order "
            f"{table.order} Adams table, got {ys.shape[0]}"
        )

    samples = []
    for i in range(ys.shape[0]):
        samples.append(jnp.asarray(dynamics(xi, ys[i]), dtype=dtype))
        xi = xi + h

    return jnp.stack(samples)
