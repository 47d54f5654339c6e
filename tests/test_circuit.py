import pytest

from pymcl import r as ρ

from spreadgate.circuit import Circuit
from spreadgate.types import Var, Witness


def test_linear_arithmetic():
    c = Circuit()
    x = c.PARAM("x")
    y = c.PARAM("y", public=True)
    assert c.stmts == {0: "ONE", 2: "y"}
    assert c.MUL(x, 3) == Var({1: 3})
    assert c.MUL(-1, y) == Var({2: ρ - 1})
    assert c.MUL(x, 0) == 0
    assert c.ADD(x, 2) == Var({0: 2, 1: 1})
    assert c.SUB(x, x) == 0
    assert c.SUM([x, y, 1], 4) == Var({0: 5, 1: 1, 2: 1})
    assert c.gates == []


def test_product_of_variables_rejected():
    c = Circuit()
    x = c.PARAM("x")
    y = c.PARAM("y")
    with pytest.raises(ValueError, match="not linear"):
        c.MUL(x, y)


def test_constant_assertions_checked_at_once():
    c = Circuit()
    c.ASSERT_EQZ(c.SUB(3, 3))
    with pytest.raises(AssertionError, match="three"):
        c.ASSERT_EQZ(c.SUB(3, 4), msg="three")
    assert c.gates == []


def test_lookup():
    c = Circuit()
    x = c.PARAM("x")
    table = ((0,), (1,), (4,), (5,))
    c.LOOKUP((x,), table)
    # one wire per table row, each boolean, one for their sum and one for the selected entry
    assert c.wire_count == 2 + len(table)
    assert len(c.gates) == len(table) + 2
    c.LOOKUP((4,), table)
    with pytest.raises(AssertionError):
        c.LOOKUP((2,), table, msg="2 is not spread")

    witness = Witness(c.funcs, {"x": 4})
    assert witness.vec == [1, 4, 0, 0, 1, 0]
    for aM, bM, cM, msg in c.gates:
        assert witness.apply(aM) * witness.apply(bM) % ρ == witness.apply(cM)

    witness = Witness(c.funcs, {"x": 2})
    assert witness.vec[2:] == [0, 0, 0, 0]
    assert any(witness.apply(aM) * witness.apply(bM) % ρ != witness.apply(cM) for aM, bM, cM, msg in c.gates)
