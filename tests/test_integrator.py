"""Tests for composite Simpson integration."""

import math

import pytest

from mathview.errors import IntegrationError, InvalidBoundsError, NonFiniteEndpointError
from mathview.evaluator import Evaluator
from mathview.integrator import (
    IntegralResult,
    coerce_segments,
    compute_integral,
    integrate,
    integrate_formula,
    reference_integral,
)


def compiled(formula):
    return Evaluator().compile(formula)


class Recorder:
    """Unary function that remembers where it was evaluated."""

    def __init__(self, func=lambda x: x):
        self.func = func
        self.calls = []

    def __call__(self, x):
        self.calls.append(x)
        return self.func(x)


class TestCoerceSegments:
    @pytest.mark.parametrize("value, expected", [
        (1000, 1000),
        (5, 6),
        (6, 6),
        (1, 2),
        (-7, 8),
        (3.9, 4),
        (0, 1000),
        (None, 1000),
        ("abc", 1000),
        (float("inf"), 1000),
        (float("nan"), 1000),
    ])
    def test_coerce(self, value, expected) -> None:
        assert coerce_segments(value) == expected


class TestIntegrate:
    def test_zero_width_interval_skips_evaluation(self) -> None:
        f = Recorder()
        assert integrate(f, 2.5, 2.5, 10) == 0.0
        assert f.calls == []

    @pytest.mark.parametrize("n", [2, 4, 10, 1000])
    def test_linear_exact(self, n) -> None:
        assert integrate(compiled("x"), 0, 1, n) == pytest.approx(0.5, abs=1e-12)

    def test_cubic_exact_with_two_segments(self) -> None:
        assert integrate(compiled("x^3"), 0, 2, 2) == pytest.approx(4.0, abs=1e-12)

    def test_square(self) -> None:
        assert integrate(compiled("x^2"), 0, 3, 1000) == pytest.approx(9.0, abs=1e-6)

    def test_sine(self) -> None:
        assert integrate(compiled("sin(x)"), 0, math.pi) == pytest.approx(2.0, abs=1e-9)

    def test_orientation_antisymmetry(self) -> None:
        f = compiled("sin(x) + 0.5 * x")
        forward = integrate(f, -1, 2, 100)
        backward = integrate(f, 2, -1, 100)
        assert forward == pytest.approx(-backward, abs=1e-12)

    def test_odd_segment_count_rounded_up(self) -> None:
        assert integrate(math.exp, 0, 1, 5) == integrate(math.exp, 0, 1, 6)

    def test_uses_even_count_of_segments(self) -> None:
        f = Recorder()
        integrate(f, 0, 1, 5)
        assert len(f.calls) == 7

    def test_default_segments(self) -> None:
        f = Recorder()
        integrate(f, 0, 1)
        assert len(f.calls) == 1001

    def test_string_bounds_accepted(self) -> None:
        assert integrate(compiled("x"), "0", "1", 2) == pytest.approx(0.5)

    def test_non_finite_endpoint_fails(self) -> None:
        with pytest.raises(NonFiniteEndpointError):
            integrate(compiled("1/x"), 0, 1, 10)
        with pytest.raises(NonFiniteEndpointError):
            integrate(compiled("1/x"), -1, 0, 10)

    def test_raising_endpoint_fails(self) -> None:
        with pytest.raises(NonFiniteEndpointError):
            integrate(lambda x: math.log(x), 0, 1, 10)

    def test_undefined_interior_point_skipped(self) -> None:
        def f(x):
            return 1.0 if x != 0 else float("nan")

        # h = 1, sum = f(-1) + f(1), the weight-4 midpoint is dropped
        assert integrate(f, -1, 1, 2) == pytest.approx(2 / 3)

    @pytest.mark.parametrize("n", [2, 4])
    def test_pole_inside_interval_succeeds(self, n) -> None:
        assert integrate(compiled("1/x"), -1, 1, n) == pytest.approx(0.0, abs=1e-12)

    @pytest.mark.parametrize("a, b", [
        (float("nan"), 1),
        (0, float("inf")),
        (float("-inf"), 0),
        ("abc", 1),
        (None, 1),
    ])
    def test_invalid_bounds_rejected_before_evaluation(self, a, b) -> None:
        f = Recorder()
        with pytest.raises(InvalidBoundsError):
            integrate(f, a, b, 10)
        assert f.calls == []

    def test_invalid_bounds_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            integrate(lambda x: x, float("nan"), float("nan"))


class TestIntegrateFormula:
    def test_formula(self) -> None:
        assert integrate_formula(Evaluator(), "x^2", 0, 3, 1000) == pytest.approx(9.0, abs=1e-6)

    def test_bad_formula(self) -> None:
        with pytest.raises(IntegrationError, match="Invalid expression") as info:
            integrate_formula(Evaluator(), "x +", 0, 1)
        assert not isinstance(info.value, InvalidBoundsError)

    def test_zero_width_before_compile(self) -> None:
        assert integrate_formula(Evaluator(), "x +", 1, 1) == 0.0

    def test_bounds_checked_before_compile(self) -> None:
        with pytest.raises(InvalidBoundsError):
            integrate_formula(Evaluator(), "x +", float("nan"), 1)


class TestReferenceIntegral:
    def test_agrees_with_simpson(self) -> None:
        f = compiled("exp(-x^2)")
        value, abserr = reference_integral(f, -2, 2)
        assert value == pytest.approx(integrate(f, -2, 2), abs=1e-8)
        assert abserr < 1e-6

    def test_zero_width(self) -> None:
        assert reference_integral(compiled("x"), 1, 1) == (0.0, 0.0)

    def test_endpoint_strictness(self) -> None:
        with pytest.raises(NonFiniteEndpointError):
            reference_integral(compiled("1/x"), 0, 1)

    def test_reversed(self) -> None:
        value, _ = reference_integral(compiled("x^2"), 3, 0)
        assert value == pytest.approx(-9.0)


class TestComputeIntegral:
    def test_success_remembers_inputs(self) -> None:
        result = compute_integral(Evaluator(), "x^2", 0.0, 3.0)
        assert result.ok
        assert result.value == pytest.approx(9.0, abs=1e-6)
        assert result.reference == pytest.approx(9.0)
        assert result.abserr < 1e-6
        assert result.matches("x^2", 0.0, 3.0)

    def test_other_inputs_do_not_match(self) -> None:
        result = compute_integral(Evaluator(), "x^2", 0.0, 3.0)
        assert not result.matches("x^3", 0.0, 3.0)
        assert not result.matches("x^2", -1.0, 3.0)
        assert not result.matches("x^2", 0.0, 2.0)

    def test_failure_is_captured(self) -> None:
        result = compute_integral(Evaluator(), "1/x", 0.0, 1.0)
        assert not result.ok
        assert result.value is None
        assert "not finite" in result.error
        assert result.matches("1/x", 0.0, 1.0)

    def test_invalid_bounds_captured(self) -> None:
        result = compute_integral(Evaluator(), "x", float("nan"), 1.0)
        assert isinstance(result, IntegralResult)
        assert not result.ok
