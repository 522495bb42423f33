# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "abmjax"]
#
# [tool.uv.sources]
# abmjax = { path = ".." }
# ///
"""Integrate a scalar test problem with the Adams-Bashforth-Moulton integrator.

Bootstraps the history with RK4, marches the predictor-corrector with
lax.scan, and compares the result against the analytic solution.

Requires abmjax to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/integrate_scalar.py [OPTIONS]

Examples:
    # Exponential decay with the 12-step method
    uv run examples/integrate_scalar.py --problem decay --order 12

    # Logistic growth, 20-step method, larger step
    uv run examples/integrate_scalar.py --problem logistic --order 20 --step 0.05

    # Tight iteration budget to see non-converged corrector steps
    uv run examples/integrate_scalar.py --max-iterations 1
"""

import enum
import time
from typing import Annotated

import jax
import jax.numpy as jnp
import typer

from abmjax import set_dtype
from abmjax.integrators import (
    CorrectorConfig,
    adams_integrate,
    adams_start,
    get_coefficient_table,
)

set_dtype(jnp.float64)  # Must be before any JIT compilation


class Problem(enum.StrEnum):
    """Scalar test problem with a known solution."""

    decay = "decay"
    growth = "growth"
    logistic = "logistic"
    sine = "sine"


# (dynamics, solution(x, y0))
_PROBLEMS = {
    Problem.decay: (lambda x, y: -y, lambda x, y0: y0 * jnp.exp(-x)),
    Problem.growth: (lambda x, y: y, lambda x, y0: y0 * jnp.exp(x)),
    Problem.logistic: (
        lambda x, y: y * (1.0 - y),
        lambda x, y0: 1.0 / (1.0 + (1.0 / y0 - 1.0) * jnp.exp(-x)),
    ),
    Problem.sine: (lambda x, y: jnp.cos(x), lambda x, y0: y0 + jnp.sin(x)),
}


def main(
    problem: Annotated[Problem, typer.Option(help="Test problem")] = Problem.decay,
    order: Annotated[int, typer.Option(help="Adams order (12, 16 or 20)")] = 12,
    step: Annotated[float, typer.Option(help="Step size h")] = 0.01,
    length: Annotated[float, typer.Option(help="Integration interval length")] = 5.0,
    y0: Annotated[float, typer.Option(help="Initial value y(0)")] = 0.5,
    tolerance: Annotated[
        float | None, typer.Option(help="Corrector tolerance (default: dtype-adaptive)")
    ] = None,
    max_iterations: Annotated[int, typer.Option(help="Corrector iteration budget")] = 10,
    substeps: Annotated[int, typer.Option(help="RK4 substeps per starting step")] = 4,
) -> None:
    """Integrate a scalar ODE and report the error against the exact solution."""
    dynamics, solution = _PROBLEMS[problem]
    table = get_coefficient_table(order)
    config = CorrectorConfig(tolerance=tolerance, max_iterations=max_iterations)

    n_steps = int(round(length / step)) - table.order
    if n_steps < 1:
        print(f"ERROR: interval too short for an order {order} start at h={step}.")
        raise typer.Exit(code=1)

    print(f"Problem: {problem.value}, order {order}, h={step}, y0={y0}")
    print(f"  RK4 start: {table.order} steps x {substeps} substeps")
    print(f"  Adams steps: {n_steps}")

    x_k, y_k, history = adams_start(dynamics, 0.0, y0, step, table, substeps=substeps)

    run = jax.jit(
        lambda x, y, hist: adams_integrate(dynamics, x, y, step, n_steps, hist, table, config)
    )

    t0 = time.perf_counter()
    traj = run(x_k, y_k, history)
    traj.y.block_until_ready()
    print(f"  Compilation + integration took {time.perf_counter() - t0:.2f}s")

    exact = solution(traj.x, y0)
    error = jnp.abs(traj.y - exact)
    n_failed = int(jnp.sum(traj.iterations > max_iterations))

    print("\nResults:")
    print(f"  y({float(traj.x[-1]):.4f}) = {float(traj.y[-1]):.16e}")
    print(f"  exact         = {float(exact[-1]):.16e}")
    print(f"  max |error|   = {float(jnp.max(error)):.3e}")
    print(f"  mean corrector iterations = {float(jnp.mean(traj.iterations)):.2f}")
    if n_failed > 0:
        print(f"  Warning: {n_failed} step(s) did not converge within {max_iterations} iterations")

    print("\nDone.")


if __name__ == "__main__":
    typer.run(main)
