"""Turn an expression into a finite, plottable point sequence."""

import logging
import math
from collections import namedtuple
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from mathview import config
from mathview.errors import CompileError
from mathview.evaluator import finite_value

logger = logging.getLogger(__name__)

# y is None where the expression is undefined
SamplePoint = namedtuple("SamplePoint", ["x", "y"])


@dataclass
class SampleSeries:
    points: List[SamplePoint] = field(default_factory=list)

    @classmethod
    def empty(cls):
        return cls([])

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    @property
    def xs(self):
        return np.array([p.x for p in self.points], dtype=float)

    @property
    def ys(self):
        """y values with nan in place of undefined samples."""
        return np.array([np.nan if p.y is None else p.y for p in self.points], dtype=float)

    @property
    def defined(self):
        return sum(1 for p in self.points if p.y is not None)


@dataclass
class PlotData:
    formula: Optional[str] = None
    series: SampleSeries = field(default_factory=SampleSeries.empty)
    derivative: SampleSeries = field(default_factory=SampleSeries.empty)
    derivative_text: str = ""
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


def clamp_count(count):
    """Coerce a sample count into [MIN_SAMPLES, MAX_SAMPLES]."""
    try:
        value = float(count)
    except (TypeError, ValueError):
        return config.DEFAULT_SAMPLES
    if not math.isfinite(value) or value == 0:
        return config.DEFAULT_SAMPLES
    return max(config.MIN_SAMPLES, min(config.MAX_SAMPLES, int(value)))


def _round(value, precision):
    if precision is None:
        return value
    return round(value, precision)


def sample(expression, xmin, xmax, count=config.DEFAULT_SAMPLES, precision=config.ROUND_DIGITS):
    """Sample expression at count evenly spaced points from xmin to xmax.

    Failed or non-finite evaluations are recorded as undefined points; the
    series always has exactly the clamped count of points. A reversed or
    zero-width domain is not rejected.
    """
    n = clamp_count(count)
    xmin, xmax = float(xmin), float(xmax)
    step = (xmax - xmin) / (n - 1)
    with np.errstate(invalid="ignore", over="ignore"):
        grid = xmin + np.arange(n) * step

    points = []
    for x in grid.tolist():
        y = finite_value(expression, x)
        points.append(SamplePoint(_round(x, precision), None if y is None else _round(y, precision)))
    return SampleSeries(points)


def build_plot(
    evaluator,
    formula,
    fallback=None,
    xmin=config.X_MIN,
    xmax=config.X_MAX,
    count=config.DEFAULT_SAMPLES,
    with_derivative=False,
    precision=config.ROUND_DIGITS,
):
    """Compile formula (or fallback) and sample it, plus its derivative if asked.

    Never raises for bad formulas: when neither formula compiles the result is
    an empty PlotData with error set.
    """
    try:
        expression = evaluator.compile(formula)
        used = formula
    except CompileError as exc:
        if fallback is None or fallback == formula:
            logger.info("Formula %r does not compile: %s", formula, exc)
            return PlotData(error=str(exc))
        logger.info("Formula %r does not compile, trying %r", formula, fallback)
        try:
            expression = evaluator.compile(fallback)
            used = fallback
        except CompileError as exc2:
            logger.warning("Neither %r nor %r compiles: %s", formula, fallback, exc2)
            return PlotData(error=str(exc2))

    plot = PlotData(formula=used, series=sample(expression, xmin, xmax, count, precision))

    if with_derivative:
        try:
            derivative = evaluator.derive(used)
        except CompileError as exc:
            logger.info("No derivative for %r: %s", used, exc)
        else:
            plot.derivative = sample(derivative, xmin, xmax, count, precision)
            plot.derivative_text = derivative.text
    return plot
