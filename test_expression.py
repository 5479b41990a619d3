import math

import numpy as np
import pytest

from dual_ad.aad import (
    Constant, Power, Log, Add, Subtract, Product, Division,
    DomainError, variable, evaluate, central_difference,
)
from dual_ad.aad.validate import find_violations, validate_expression


def test_constant():
    c = Constant(4.5)
    assert c.eval(123.0) == 4.5
    assert c.derivative(123.0) == 0.0


@pytest.mark.parametrize("n", [0, 1, 2, 3, -1])
@pytest.mark.parametrize("x", [0.5, 2.0, -1.5, 3.0])
def test_power(n, x):
    p = Power(n)
    assert p.eval(x) == pytest.approx(x ** n)
    expected = 0.0 if n == 0 else n * x ** (n - 1)
    assert p.derivative(x) == pytest.approx(expected)


def test_power_reads_raw_point():
    # Power never wraps a sub-expression: (x+1)^2 needs an explicit product
    shifted = Power(1) + Constant(1)
    square = shifted * shifted
    assert square.eval(2.0) == 9.0
    assert square.derivative(2.0) == 6.0
    assert Power(2).eval(2.0) == 4.0


def test_power_degenerate_warns():
    with pytest.warns(RuntimeWarning):
        val = Power(-1).eval(0.0)
    assert np.isinf(val)


def test_log():
    inner = Power(2) - Constant(1)
    e = Log(inner)
    value, deriv = evaluate(e, 2.0)
    assert value == pytest.approx(math.log(3.0))
    assert deriv == pytest.approx(inner.derivative(2.0) / inner.eval(2.0))


@pytest.mark.parametrize("x", [1.0, 0.5, -1.0])
def test_log_non_positive_argument(x):
    e = Log(Power(2) - Constant(1))
    with pytest.raises(DomainError) as info:
        evaluate(e, x)
    assert info.value.operation == "log"
    assert info.value.where == "ln(x^2 - 1)"


def test_add_subtract_product():
    x = variable()
    assert evaluate(Add(Power(2), Constant(3)), 2.0) == (7.0, 4.0)
    assert evaluate(Subtract(Power(3), Power(2)), 2.0) == (4.0, 8.0)
    # d/dx [x^2 * (x + 1)] = 3x^2 + 2x
    assert evaluate(Product(Power(2), x + 1), 2.0) == (12.0, 16.0)


def test_division_quotient_rule():
    e = Division(Power(2) + Constant(1), Power(1) - Constant(2))
    x = 3.5
    value, deriv = evaluate(e, x)
    n, dn = x * x + 1, 2 * x
    d, dd = x - 2, 1.0
    assert value == pytest.approx(n / d)
    assert deriv == pytest.approx((dn * d - n * dd) / (d * d))
    assert deriv == pytest.approx(central_difference(e.eval, x, 1e-5), abs=1e-6)


def test_division_by_zero():
    e = Division(Constant(1), Power(1) - Constant(2))
    with pytest.raises(DomainError) as info:
        e.eval(2.0)
    assert info.value.operation == "div"
    assert info.value.argument == 0.0


def test_operators_wrap_numbers():
    x = variable()
    e = 5 - 2 * x / (x + 1)
    value, deriv = evaluate(e, 1.0)
    assert value == pytest.approx(4.0)
    # d/dx [2x/(x+1)] = 2/(x+1)^2
    assert deriv == pytest.approx(-0.5)


def test_shared_child_is_copied():
    x = Power(1)
    e = x * x
    assert e.left is x
    assert e.right is not x
    assert evaluate(e, 3.0) == (9.0, 6.0)


def test_construction_rejects_non_numeric():
    with pytest.raises(TypeError):
        Add(Power(1), "x")


def test_str():
    e = Log((Power(2) - Constant(5)) * (Constant(4) - Constant(3) * Power(1)))
    assert str(e) == "ln((x^2 - 5) * (4 - (3 * x)))"


def test_reusable_across_points():
    e = Log(Power(2) + Constant(1))
    first = evaluate(e, 1.0)
    evaluate(e, 7.0)
    assert evaluate(e, 1.0) == first


def test_find_violations_reports_each_branch():
    bad_log = Log(Power(1) - Constant(10))
    bad_div = Division(Constant(1), Power(1) - Constant(2))
    found = find_violations(Add(bad_log, bad_div), 2.0)
    assert [e.operation for e in found] == ["log", "div"]


def test_find_violations_stops_above_failure():
    e = Division(Constant(1), Log(Power(1) - Constant(10)))
    found = find_violations(e, 1.0)
    assert len(found) == 1
    assert found[0].operation == "log"


def test_validate_expression():
    e = Log(Power(2) + Constant(1))
    validate_expression(e, 0.0)
    with pytest.raises(DomainError):
        validate_expression(Log(Constant(0)), 1.0)
