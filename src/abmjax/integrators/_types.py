"""Type definitions for the Adams-Bashforth-Moulton integrator.

Provides the core data types shared by the predictor, corrector and step
driver:

- :class:`CoefficientTable`: Literal weights for one multistep order.
- :class:`CorrectorConfig`: Convergence tolerance and iteration budget of
  the Adams-Moulton fixed-point iteration.
- :class:`AdamsStepResult`: Output of :func:`~abmjax.integrators.adams_step`.
- :class:`AdamsTrajectory`: Output of
  :func:`~abmjax.integrators.adams_integrate`.

All types are :class:`~typing.NamedTuple` instances. The result types are
pytrees of arrays and pass through ``jax.jit``, ``jax.vmap`` and
``jax.lax.scan`` unchanged. ``CoefficientTable`` and ``CorrectorConfig``
hold plain Python values and are meant to be closed over (static).
"""

from __future__ import annotations

from typing import NamedTuple

from jax import Array


class CoefficientTable(NamedTuple):
    """Adams-Bashforth and Adams-Moulton weights for a fixed order.

    Both weight sequences are integers (stored as floats) over the common
    denominator ``1 / divisor``. ``bashforth[0]`` multiplies the most recent
    derivative sample; ``moulton[0]`` multiplies the derivative at the
    point being solved for.

    Attributes:
        order: Number of steps ``k``. Equals the history length.
        bashforth: ``k`` predictor weights, newest sample first.
        moulton: ``k`` corrector weights, target point first.
        divisor: Reciprocal of the common denominator, applied to both sums.
    """

    order: int
    bashforth: tuple[float, ...]
    moulton: tuple[float, ...]
    divisor: float


class CorrectorConfig(NamedTuple):
    """Configuration of the Adams-Moulton corrector iteration.

    Attributes:
        tolerance: Convergence tolerance between successive corrector
            estimates. Relative when both estimates exceed 1 in magnitude,
            absolute otherwise. ``None`` selects
            :func:`~abmjax.config.get_corrector_tolerance` for the active
            dtype.
        max_iterations: Maximum number of corrector iterations (derivative
            evaluations) per step.
    """

    tolerance: float | None = None
    max_iterations: int = 10


class AdamsStepResult(NamedTuple):
    """Result of a single predictor-corrector step.

    Attributes:
        y_next: Corrected value at ``x + h``. When the corrector did not
            converge this is the last computed estimate.
        y_predictor: Raw Adams-Bashforth estimate at ``x + h``.
        history: Updated derivative history (oldest sample dropped, the
            derivative at ``x`` appended). Pass it to the next step.
        iterations: Number of corrector iterations used. A value greater
            than ``max_iterations`` means the corrector did not converge.
        converged: ``iterations <= max_iterations``.
    """

    y_next: Array
    y_predictor: Array
    history: Array
    iterations: Array
    converged: Array


class AdamsTrajectory(NamedTuple):
    """Result of marching the integrator over many steps.

    Attributes:
        x: Abscissas of the computed points, shape ``(n_steps,)``.
        y: Corrected values at ``x``, shape ``(n_steps,)``.
        y_predictor: Adams-Bashforth estimates at ``x``.
        iterations: Corrector iterations used per step.
        history: Derivative history after the final step.
    """

    x: Array
    y: Array
    y_predictor: Array
    iterations: Array
    history: Array
