"""Formula compilation and symbolic differentiation on top of sympy.

The numeric core only needs a unary callable; this module turns user (or
model) supplied formula strings into such callables and into their symbolic
derivatives.
"""

import io
import logging
import math
import tokenize

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from mathview.errors import CompileError, EvaluationError

logger = logging.getLogger(__name__)

X = sp.Symbol("x", real=True)

TRANSFORMATIONS = standard_transformations + (implicit_multiplication_application, convert_xor)

SYMPY_NAMES = [
    "sin", "cos", "tan", "cot", "sec", "csc",
    "asin", "acos", "atan", "atan2", "acot",
    "sinh", "cosh", "tanh", "asinh", "acosh", "atanh",
    "exp", "log", "sqrt", "cbrt", "root", "Abs", "sign", "floor", "ceiling",
    "factorial", "binomial", "gamma", "loggamma", "digamma", "polygamma", "beta",
    "erf", "erfc", "zeta", "besselj", "bessely", "li", "Ei", "Heaviside",
    "Min", "Max", "re", "im", "pi", "E", "I", "oo",
]

# Names people write that sympy does not know under that spelling
EXTRA_NAMES = {
    "x": X,
    "e": sp.E,
    "pow": sp.Pow,
    "ln": sp.log,
    "log10": lambda v: sp.log(v, 10),
    "abs": sp.Abs,
    "ceil": sp.ceiling,
    "min": sp.Min,
    "max": sp.Max,
}

NAMESPACE = dict({name: getattr(sp, name) for name in SYMPY_NAMES}, **EXTRA_NAMES)

# Only what the parser transformations emit; no builtins reach eval()
PARSER_GLOBALS = {
    "__builtins__": {},
    "Integer": sp.Integer,
    "Float": sp.Float,
    "Rational": sp.Rational,
    "Symbol": sp.Symbol,
    "Function": sp.Function,
}

ALLOWED_OPS = {"+", "-", "*", "/", "**", "^", "(", ")", ","}
SKIPPED_TOKENS = {tokenize.NEWLINE, tokenize.NL, tokenize.ENDMARKER}


def check_tokens(text):
    """Reject anything but numbers, arithmetic and known names.

    parse_expr ends in eval(), so this runs before it ever sees the text.
    """
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(text).readline))
    except (tokenize.TokenError, SyntaxError) as exc:
        raise CompileError(f"Invalid formula: {text}") from exc

    unknown = []
    for tok in tokens:
        if tok.type in SKIPPED_TOKENS or tok.type == tokenize.NUMBER:
            continue
        if tok.type == tokenize.NAME:
            if tok.string not in NAMESPACE:
                unknown.append(tok.string)
            continue
        if tok.type == tokenize.OP and tok.string in ALLOWED_OPS:
            continue
        raise CompileError(f"Invalid formula: unexpected {tok.string!r}")
    if unknown:
        raise CompileError(f"Unknown name(s) {', '.join(sorted(set(unknown)))}; only x is allowed as a variable")


class Expression:
    """A sympy expression in x together with its numpy-compiled function."""

    def __init__(self, expr, source=None):
        self.expr = expr
        self.source = source if source is not None else str(expr)
        try:
            self._func = sp.lambdify(X, expr, modules=["numpy", "scipy"])
        except Exception as exc:
            raise CompileError(f"Cannot compile expression: {exc}") from exc

    def __repr__(self):
        return f"Expression({self.text!r})"

    @property
    def text(self):
        return str(self.expr)

    def evaluate(self, x):
        """Return f(x) as a float.

        Domain problems usually come back as nan or inf; anything that raises,
        or a genuinely complex result, is reported as EvaluationError.
        """
        try:
            with np.errstate(all="ignore"):
                value = self._func(np.float64(x))
            if np.iscomplexobj(value):
                if np.imag(value) != 0:
                    raise EvaluationError(f"Complex value at x={x}")
                value = np.real(value)
            return float(value)
        except (ArithmeticError, TypeError, ValueError, NameError) as exc:
            raise EvaluationError(f"Cannot evaluate {self.text} at x={x}: {exc}") from exc

    __call__ = evaluate


class Evaluator:
    """Stateless handle for compiling and differentiating formulas in x."""

    variable = "x"

    def parse(self, formula):
        if formula is None or not str(formula).strip():
            raise CompileError("Empty formula")
        text = str(formula).strip()
        check_tokens(text)
        try:
            expr = parse_expr(text, local_dict=dict(NAMESPACE), global_dict=dict(PARSER_GLOBALS),
                              transformations=TRANSFORMATIONS)
        except Exception as exc:
            raise CompileError(f"Invalid formula: {text}") from exc

        if not isinstance(expr, sp.Expr):
            raise CompileError(f"Not a numeric expression: {text}")
        unknown = sorted(str(s) for s in expr.free_symbols if s != X)
        if unknown:
            raise CompileError(f"Unknown variable(s) {', '.join(unknown)}; only x is allowed")
        return expr

    def compile(self, formula):
        return Expression(self.parse(formula), source=str(formula).strip())

    def derive(self, formula, variable="x"):
        expr = self.parse(formula)
        symbol = X if variable == self.variable else sp.Symbol(variable)
        try:
            derivative = sp.diff(expr, symbol)
        except Exception as exc:
            raise CompileError(f"Cannot differentiate {formula}") from exc
        logger.debug("d/d%s %s = %s", variable, expr, derivative)
        return Expression(derivative)


def finite_value(func, x):
    """Evaluate func at x, returning None when it fails or is not finite."""
    try:
        value = float(func(x))
    except (EvaluationError, ArithmeticError, TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value
