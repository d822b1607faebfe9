"""MathView: plot a formula in x, its derivative, and a definite integral."""

from mathview.errors import (
    CompileError,
    EvaluationError,
    IntegrationError,
    InvalidBoundsError,
    MathViewError,
    NonFiniteEndpointError,
)
from mathview.evaluator import Evaluator, Expression
from mathview.integrator import IntegralResult, compute_integral, integrate, integrate_formula, reference_integral
from mathview.normalizer import NormalizationResult, build_normalizer, passthrough
from mathview.sampler import PlotData, SamplePoint, SampleSeries, build_plot, sample

__version__ = "0.1.0"

__all__ = [
    "CompileError",
    "EvaluationError",
    "IntegralResult",
    "Evaluator",
    "Expression",
    "IntegrationError",
    "InvalidBoundsError",
    "MathViewError",
    "NonFiniteEndpointError",
    "NormalizationResult",
    "PlotData",
    "SamplePoint",
    "SampleSeries",
    "build_normalizer",
    "build_plot",
    "compute_integral",
    "integrate",
    "integrate_formula",
    "passthrough",
    "reference_integral",
    "sample",
]
