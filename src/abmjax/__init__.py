"""
abmjax is a fixed-step Adams-Bashforth-Moulton predictor-corrector ODE integrator implemented in JAX.
"""

from .config import set_dtype, get_dtype, get_corrector_tolerance

from .integrators import (
    CoefficientTable,
    CorrectorConfig,
    AdamsStepResult,
    AdamsTrajectory,
    ADAMS_12,
    ADAMS_16,
    ADAMS_20,
    get_coefficient_table,
    derive_coefficient_table,
    has_converged,
    adams_bashforth_predict,
    adams_moulton_correct,
    adams_step,
    build_history,
    adams_start,
    adams_integrate,
)

__all__ = [
    # Config
    "set_dtype",
    "get_dtype",
    "get_corrector_tolerance",
    # Coefficient tables
    "CoefficientTable",
    "ADAMS_12",
    "ADAMS_16",
    "ADAMS_20",
    "get_coefficient_table",
    "derive_coefficient_table",
    # Integrator
    "CorrectorConfig",
    "AdamsStepResult",
    "AdamsTrajectory",
    "has_converged",
    "adams_bashforth_predict",
    "adams_moulton_correct",
    "adams_step",
    "build_history",
    "adams_start",
    "adams_integrate",
]
