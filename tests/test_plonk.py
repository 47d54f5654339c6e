import pytest

from pymcl import r as ρ

from spreadgate.plonk import CUR, NEXT, Assembly, Cell, ConstraintSystem, Layouter, Region
from spreadgate.types import UNSET, MissingWitness, Value, known


def test_value_propagation():
    assert Value(2).map(lambda x: x + 1) == Value(3)
    assert Value(2).zip(Value(3)) == Value((2, 3))
    assert Value(2).unwrap() == 2
    assert known(-1) == Value(ρ - 1)


def test_unset_propagation():
    assert UNSET.map(lambda x: x + 1) is UNSET
    assert UNSET.zip(Value(3)) is UNSET
    assert Value(3).zip(UNSET) is UNSET
    assert known(None) is UNSET
    with pytest.raises(MissingWitness, match="private input"):
        UNSET.unwrap("private input")


def test_expression_evaluate():
    cs = ConstraintSystem()
    x = cs.advice_column()
    s = cs.selector()
    poly = cs.query_selector(s) * (cs.query_advice(x, CUR) * 2 + 1 - cs.query_advice(x, NEXT))
    values = {CUR: 3, NEXT: 7}
    result = poly.evaluate(
        constant=lambda c: c,
        selector=lambda _: 1,
        query=lambda column, rotation: values[rotation],
        negated=lambda v: -v,
        add=lambda a, b: a + b,
        mul=lambda a, b: a * b,
    )
    assert result == 0
    assert poly.selectors() == {s}
    assert poly.queries() == {(x, CUR), (x, NEXT)}


def test_simple_selector_rejected_in_lookup():
    cs = ConstraintSystem()
    x = cs.advice_column()
    table = cs.lookup_table_column()
    s = cs.selector()
    with pytest.raises(ValueError, match="simple selector"):
        cs.lookup("bad", lambda cs: [(cs.query_selector(s) * cs.query_advice(x), table)])
    q = cs.complex_selector()
    assert cs.lookup("good", lambda cs: [(cs.query_selector(q) * cs.query_advice(x), table)]) == 0


def test_empty_gate_rejected():
    with pytest.raises(ValueError):
        ConstraintSystem().create_gate("empty", lambda cs: [])


def test_constants_need_fixed_column():
    cs = ConstraintSystem()
    with pytest.raises(ValueError):
        cs.enable_constant(cs.advice_column())
    fixed = cs.fixed_column()
    cs.enable_constant(fixed)
    assert fixed in cs.equality


def test_copy_needs_equality():
    cs = ConstraintSystem()
    x = cs.advice_column()
    y = cs.advice_column()
    cs.enable_equality(y)
    assembly = Assembly(cs, 3, witnessed=True)
    with pytest.raises(ValueError, match="equality"):
        assembly.copy(Cell(x, 0), Cell(y, 1))
    assembly.copy(Cell(y, 0), Cell(y, 1))
    assert assembly.copies == [(Cell(y, 0), Cell(y, 1))]


def test_usable_rows():
    cs = ConstraintSystem()
    x = cs.advice_column()
    assembly = Assembly(cs, 3, witnessed=True)
    assert assembly.usable == 2
    assembly.assign_advice("ok", x, 1, Value(1))
    with pytest.raises(ValueError, match="not enough rows"):
        assembly.assign_advice("too far", x, 2, Value(1))


def test_structural_pass_keeps_positions_only():
    cs = ConstraintSystem()
    x = cs.advice_column()
    assembly = Assembly(cs, 3, witnessed=False)
    assert assembly.assign_advice("absent", x, 0, UNSET) is UNSET
    assert assembly.advice == {Cell(x, 0): None}
    with pytest.raises(MissingWitness):
        Assembly(cs, 3, witnessed=True).assign_advice("absent", x, 0, UNSET)


def test_table_padding():
    cs = ConstraintSystem()
    table = cs.lookup_table_column()
    assembly = Assembly(cs, 3, witnessed=False)
    assembly.fill_table("row 0", table, 0, Value(5))
    assert assembly.table_rows(table) == [5, 5]
    assembly.fill_table("row 1", table, 1, Value(6))
    assert assembly.table_rows(table) == [5, 6]


def test_regions_are_placed_in_sequence():
    cs = ConstraintSystem()
    x = cs.advice_column()
    assembly = Assembly(cs, 4, witnessed=True)
    layouter = Layouter(assembly)

    def two_rows(region: Region) -> int:
        region.assign_advice("first", x, 0, Value(1))
        region.assign_advice("second", x, 1, Value(2))
        return region.start

    assert layouter.namespace("one").assign_region("pair", two_rows) == 0
    assert layouter.namespace("two").assign_region("pair", two_rows) == 2
    assert [(region.name, region.start, region.rows) for region in assembly.regions] == [("one / pair", 0, 2), ("two / pair", 2, 2)]
    assert assembly.region_at(3) == "two / pair"
    assert assembly.region_at(4) is None


def test_fixed_and_instance_queries():
    cs = ConstraintSystem()
    fixed = cs.fixed_column()
    instance = cs.instance_column()
    poly = cs.query_fixed(fixed) - cs.query_instance(instance, NEXT)
    assert poly.queries() == {(fixed, CUR), (instance, NEXT)}
    assembly = Assembly(cs, 3, witnessed=False)
    region = Region(assembly, 0)
    assigned = region.assign_fixed("constant", fixed, 1, Value(-2))
    assert assigned.value == Value(ρ - 2)
    assert assembly.fixed == {Cell(fixed, 1): ρ - 2}
    assert region.rows == 2
    with pytest.raises(ValueError):
        region.assign_fixed("not fixed", instance, 0, Value(1))
