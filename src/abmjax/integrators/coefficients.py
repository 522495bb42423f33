"""Adams-Bashforth and Adams-Moulton coefficient tables.

The predictor of order ``k`` is the explicit ``k``-step Adams-Bashforth
formula

.. math::

    y_{i+1} = y_i + h \\sum_{j=0}^{k-1} \\beta_j f_{i-j}

and the corrector is the implicit ``(k-1)``-step Adams-Moulton formula

.. math::

    y_{i+1} = y_i + h \\sum_{j=0}^{k-1} \\gamma_j f_{i+1-j}

Both weight sets are stored as integers over a shared denominator ``D`` so
that ``beta_j = bashforth[j] * divisor`` with ``divisor = 1 / D``.

The literal tables :data:`ADAMS_12`, :data:`ADAMS_16` and :data:`ADAMS_20`
are the published decimal constants evaluated in double precision. They are
kept as literals rather than derived at import so results are reproducible
bit for bit. :func:`adams_weights` derives the exact rational weights of any
order and is used to check the literals and to build tables for other
orders.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction

import jax.numpy as jnp

from abmjax.config import get_dtype
from abmjax.integrators._types import CoefficientTable

logger = logging.getLogger(__name__)


def make_coefficient_table(
    bashforth,
    moulton,
    divisor: float,
) -> CoefficientTable:
    """Build a validated :class:`CoefficientTable`.

    Args:
        bashforth: Predictor weights, most recent sample first.
        moulton: Corrector weights, target point first.
        divisor: Reciprocal of the common denominator of both weight sets.

    Returns:
        CoefficientTable: Table with ``order == len(bashforth)``.

    Raises:
        ValueError: If the weight sequences differ in length or hold fewer
            than two weights.
    """
    bashforth = tuple(float(b) for b in bashforth)
    moulton = tuple(float(m) for m in moulton)
    if len(bashforth) != len(moulton):
        raise ValueError(
            f"bashforth and moulton must have the same length, got "
            f"{len(bashforth)} and {len(moulton)}"
        )
    if len(bashforth) < 2:
        raise ValueError(f"Adams order must be at least 2, got {len(bashforth)}")
    return CoefficientTable(
        order=len(bashforth),
        bashforth=bashforth,
        moulton=moulton,
        divisor=float(divisor),
    )


# ──────────────────────────────────────────────
# Literal tables
# ──────────────────────────────────────────────

ADAMS_12 = make_coefficient_table(
    bashforth=(
        4527766399.0, -19433810163.0, 61633227185.0, -135579356757.0,
        214139355366.0, -247741639374.0, 211103573298.0, -131365867290.0,
        58189107627.0, -17410248271.0, 3158642445.0, -262747265.0,
    ),
    moulton=(
        262747265.0, 1374799219.0, -2092490673.0, 3828828885.0,
        -5519460582.0, 6043521486.0, -4963166514.0, 3007739418.0,
        -1305971115.0, 384709327.0, -68928781.0, 5675265.0,
    ),
    divisor=1.0 / 958003200.0,
)

ADAMS_16 = make_coefficient_table(
    bashforth=(
        362555126427073.0, -2161567671248849.0, 9622096909515337.0,
        -30607373860520569.0, 72558117072259733.0, -131963191940828581.0,
        187463140112902893.0, -210020588912321949.0, 186087544263596643.0,
        -129930094104237331.0, 70724351582843483.0, -29417910911251819.0,
        9038571752734087.0, -1934443196892599.0, 257650275915823.0,
        -16088129229375.0,
    ),
    moulton=(
        16088129229375.0, 105145058757073.0, -230992163723849.0,
        612744541065337.0, -1326978663058069.0, 2285168598349733.0,
        -3129453071993581.0, 3414941728852893.0, -2966365730265699.0,
        2039345879546643.0, -1096355235402331.0, 451403108933483.0,
        -137515713789319.0, 29219384284087.0, -3867689367599.0,
        240208245823.0,
    ),
    divisor=1.0 / 62768369664000.0,
)

ADAMS_20 = make_coefficient_table(
    bashforth=(
        691668239157222107697.0, -5292843584961252933125.0,
        30349492858024727686755.0, -126346544855927856134295.0,
        399537307669842150996468.0, -991168450545135070835076.0,
        1971629028083798845750380.0, -3191065388846318679544380.0,
        4241614331208149947151790.0, -4654326468801478894406214.0,
        4222756879776354065593786.0, -3161821089800186539248210.0,
        1943018818982002395655620.0, -970350191086531368649620.0,
        387739787034699092364924.0, -121059601023985433003532.0,
        28462032496476316665705.0, -4740335757093710713245.0,
        498669220956647866875.0, -24919383499187492303.0,
    ),
    moulton=(
        24919383499187492303.0, 193280569173472261637.0,
        -558160720115629395555.0, 1941395668950986461335.0,
        -5612131802364455926260.0, 13187185898439270330756.0,
        -25293146116627869170796.0, 39878419226784442421820.0,
        -51970649453670274135470.0, 56154678684618739939910.0,
        -50320851025594566473146.0, 37297227252822858381906.0,
        -22726350407538133839300.0, 11268210124987992327060.0,
        -4474886658024166985340.0, 1389665263296211699212.0,
        -325187970422032795497.0, 53935307402575440285.0,
        -5652892248087175675.0, 281550972898020815.0,
    ),
    divisor=1.0 / 102181884343418880000.0,
)

_TABLES = {
    12: ADAMS_12,
    16: ADAMS_16,
    20: ADAMS_20,
}

SUPPORTED_ORDERS = tuple(sorted(_TABLES))

# (order, dtype name) pairs already warned about
_warned_low_precision: set[tuple[int, str]] = set()


def get_coefficient_table(order: int) -> CoefficientTable:
    """Return the literal coefficient table for a published order.

    Logs a precision warning the first time each order is requested under a
    dtype other than float64.

    Args:
        order: Number of steps. One of :data:`SUPPORTED_ORDERS`.

    Returns:
        CoefficientTable: The literal table.

    Raises:
        ValueError: If no literal table exists for *order*. Use
            :func:`derive_coefficient_table` for other orders.
    """
    if order not in _TABLES:
        raise ValueError(
            f"No literal Adams table for order {order}. "
            f"Supported orders: {SUPPORTED_ORDERS}"
        )
    dtype_name = jnp.dtype(get_dtype()).name
    if dtype_name != "float64" and (order, dtype_name) not in _warned_low_precision:
        _warned_low_precision.add((order, dtype_name))
        logger.warning(
            "Adams order %d weights lose precision in %s; use set_dtype(jnp.float64)",
            order,
            dtype_name,
        )
    return _TABLES[order]


# ──────────────────────────────────────────────
# Exact derivation
# ──────────────────────────────────────────────

def _basis_weight(order: int, j: int, shift: int) -> Fraction:
    """Integrate the j-th Lagrange basis polynomial over one step.

    Nodes sit at ``u = shift - i`` for ``i = 0..order-1`` in units of ``h``
    relative to the current point, integrated over ``u`` in ``[0, 1]``.
    """
    poly = [Fraction(1)]
    for i in range(order):
        if i == j:
            continue
        # multiply by (u + i - shift)
        c = i - shift
        product = [Fraction(0)] * (len(poly) + 1)
        for p, a in enumerate(poly):
            product[p] += a * c
            product[p + 1] += a
        poly = product

    integral = sum(a / (p + 1) for p, a in enumerate(poly))
    nodal = (-1) ** j * math.factorial(j) * math.factorial(order - 1 - j)
    return integral / nodal


def adams_weights(order: int) -> tuple[tuple[Fraction, ...], tuple[Fraction, ...]]:
    """Compute the exact Adams-Bashforth and Adams-Moulton weights.

    Args:
        order: Number of weights ``k`` in each formula (``k >= 2``).

    Returns:
        tuple: ``(bashforth, moulton)`` as tuples of
        :class:`~fractions.Fraction`. Each sums to exactly 1.

    Raises:
        ValueError: If *order* is less than 2.

    Examples:
        ```python
        from abmjax.integrators import adams_weights
        ab, am = adams_weights(2)
        ab  # (Fraction(3, 2), Fraction(-1, 2))
        am  # (Fraction(1, 2), Fraction(1, 2))
        ```
    """
    if order < 2:
        raise ValueError(f"Adams order must be at least 2, got {order}")
    bashforth = tuple(_basis_weight(order, j, 0) for j in range(order))
    moulton = tuple(_basis_weight(order, j, 1) for j in range(order))
    return bashforth, moulton


def derive_coefficient_table(order: int, denominator: int | None = None) -> CoefficientTable:
    """Build a coefficient table from the exact rational weights.

    The weights are scaled to integers over *denominator* and stored as
    floats, the same representation as the literal tables.

    Args:
        order: Number of steps ``k`` (``k >= 2``).
        denominator: Common denominator ``D``. Defaults to the least common
            denominator of all weights.

    Returns:
        CoefficientTable: Table with ``divisor == 1.0 / D``.

    Raises:
        ValueError: If *order* is less than 2, or if *denominator* does not
            turn every weight into an integer.
    """
    bashforth, moulton = adams_weights(order)
    weights = bashforth + moulton

    if denominator is None:
        denominator = 1
        for w in weights:
            denominator = math.lcm(denominator, w.denominator)

    scaled = [w * denominator for w in weights]
    if any(s.denominator != 1 for s in scaled):
        raise ValueError(
            f"Denominator {denominator} is not a common denominator of the "
            f"order {order} Adams weights"
        )

    logger.debug("Derived Adams order %d table with denominator %d", order, denominator)
    return make_coefficient_table(
        bashforth=[float(s) for s in scaled[:order]],
        moulton=[float(s) for s in scaled[order:]],
        divisor=1.0 / float(denominator),
    )
