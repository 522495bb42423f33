"""Adams-Bashforth-Moulton predictor-corrector integrators.

Provides a fixed-step, fixed-order Adams predictor-corrector pair for scalar
ODEs ``y' = f(x, y)``, implemented in JAX for compatibility with ``jax.jit``
and ``jax.vmap``. The order is selected by a :class:`CoefficientTable`.

Available tables:

- :data:`ADAMS_12` -- 12-step Adams-Bashforth / 11-step Adams-Moulton
- :data:`ADAMS_16` -- 16-step Adams-Bashforth / 15-step Adams-Moulton
- :data:`ADAMS_20` -- 20-step Adams-Bashforth / 19-step Adams-Moulton

Tables of other orders can be built with :func:`derive_coefficient_table`.

The step function has the interface::

    result = adams_step(dynamics, x, y, h, history, table, config)

where ``dynamics(x, y) -> dy/dx`` defines the ODE right-hand side, and the
result is an :class:`AdamsStepResult` named tuple carrying the updated
history for the next step.
"""

from abmjax.integrators._convergence import has_converged
from abmjax.integrators._types import (
    AdamsStepResult,
    AdamsTrajectory,
    CoefficientTable,
    CorrectorConfig,
)
from abmjax.integrators.adams import (
    adams_bashforth_predict,
    adams_moulton_correct,
    adams_step,
    build_history,
)
from abmjax.integrators.coefficients import (
    ADAMS_12,
    ADAMS_16,
    ADAMS_20,
    SUPPORTED_ORDERS,
    adams_weights,
    derive_coefficient_table,
    get_coefficient_table,
    make_coefficient_table,
)
from abmjax.integrators.propagate import (
    adams_integrate,
    adams_start,
    rk4_starting_values,
)

__all__ = [
    "AdamsStepResult",
    "AdamsTrajectory",
    "CoefficientTable",
    "CorrectorConfig",
    "ADAMS_12",
    "ADAMS_16",
    "ADAMS_20",
    "SUPPORTED_ORDERS",
    "adams_weights",
    "derive_coefficient_table",
    "get_coefficient_table",
    "make_coefficient_table",
    "has_converged",
    "adams_bashforth_predict",
    "adams_moulton_correct",
    "adams_step",
    "build_history",
    "adams_integrate",
    "adams_start",
    "rk4_starting_values",
]
