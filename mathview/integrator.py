"""Definite integrals by composite Simpson's rule.

Endpoints are strict: f(a) and f(b) must both be finite or the integration
fails. Interior points are lenient: an undefined interior sample contributes
nothing and the sum carries on.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from scipy.integrate import quad

from mathview import config
from mathview.errors import (
    CompileError,
    IntegrationError,
    InvalidBoundsError,
    MathViewError,
    NonFiniteEndpointError,
)
from mathview.evaluator import finite_value

logger = logging.getLogger(__name__)


def coerce_segments(segment_count):
    """Return an even segment count >= 2."""
    try:
        value = float(segment_count)
    except (TypeError, ValueError):
        return config.DEFAULT_SEGMENTS
    if not math.isfinite(value) or value == 0:
        return config.DEFAULT_SEGMENTS
    n = max(2, int(abs(value)))
    if n % 2:
        n += 1
    return n


def _bound(value):
    try:
        bound = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidBoundsError("Invalid integration bounds") from exc
    if not math.isfinite(bound):
        raise InvalidBoundsError("Invalid integration bounds")
    return bound


def _endpoints(f, lower, upper):
    fa = finite_value(f, lower)
    fb = finite_value(f, upper)
    if fa is None or fb is None:
        raise NonFiniteEndpointError("The function is not finite at the integration bounds")
    return fa, fb


def integrate(f, a, b, segment_count=config.DEFAULT_SEGMENTS):
    """Approximate the integral of f from a to b.

    If a > b the result is minus the integral from b to a.
    """
    lower, upper = _bound(a), _bound(b)
    if lower == upper:
        return 0.0

    n = coerce_segments(segment_count)
    h = (upper - lower) / n

    fa, fb = _endpoints(f, lower, upper)
    total = fa + fb
    skipped = 0
    for i in range(1, n):
        fx = finite_value(f, lower + i * h)
        if fx is None:
            skipped += 1
            continue
        total += (4 if i % 2 else 2) * fx

    if skipped:
        logger.debug("Skipped %d undefined interior point(s) of %d", skipped, n - 1)
    return (h / 3) * total


def integrate_formula(evaluator, formula, a, b, segment_count=config.DEFAULT_SEGMENTS):
    lower, upper = _bound(a), _bound(b)
    if lower == upper:
        return 0.0
    try:
        expression = evaluator.compile(formula)
    except CompileError as exc:
        raise IntegrationError("Invalid expression for integration") from exc
    return integrate(expression, lower, upper, segment_count)


def reference_integral(f, a, b):
    """Cross-check with adaptive quadrature; returns (value, abserr).

    Same bound and endpoint rules as integrate(); undefined interior points
    count as zero.
    """
    lower, upper = _bound(a), _bound(b)
    if lower == upper:
        return 0.0, 0.0
    _endpoints(f, lower, upper)

    def integrand(x):
        y = finite_value(f, x)
        return 0.0 if y is None else y

    value, abserr = quad(integrand, lower, upper, limit=200)
    return value, abserr


@dataclass(frozen=True)
class IntegralResult:
    """Outcome of one integration request, remembered with its inputs."""

    formula: str
    a: float
    b: float
    value: Optional[float] = None
    reference: Optional[float] = None
    abserr: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None

    def matches(self, formula, a, b):
        return (self.formula, self.a, self.b) == (formula, a, b)


def compute_integral(evaluator, formula, a, b, segment_count=config.DEFAULT_SEGMENTS):
    """Simpson value plus the quad reference; failures come back in .error."""
    try:
        value = integrate_formula(evaluator, formula, a, b, segment_count)
        reference, abserr = reference_integral(evaluator.compile(formula), a, b)
    except MathViewError as exc:
        logger.warning("Integration of %r over [%s, %s] failed: %s", formula, a, b, exc)
        return IntegralResult(formula, a, b, error=str(exc))
    return IntegralResult(formula, a, b, value=value, reference=reference, abserr=abserr)
