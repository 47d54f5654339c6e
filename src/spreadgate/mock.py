from dataclasses import dataclass

from pymcl import r as ρ

from .plonk import Assembly, Cell, Expression, synthesize
from .plonk import Circuit as PlonkCircuit
from .types import Fld


@dataclass(frozen=True)
class ConstraintNotSatisfied:
    gate: str
    index: int
    region: str | None
    row: int

    def __str__(self) -> str:
        return "constraint {} of gate {!r} is not satisfied at row {} (region {!r})".format(self.index, self.gate, self.row, self.region)


@dataclass(frozen=True)
class CellNotAssigned:
    gate: str
    region: str | None
    cell: Cell

    def __str__(self) -> str:
        return "gate {!r} queries unassigned cell {} (region {!r})".format(self.gate, self.cell, self.region)


@dataclass(frozen=True)
class Lookup:
    name: str
    region: str | None
    row: int

    def __str__(self) -> str:
        return "input of lookup {!r} at row {} is not in its table (region {!r})".format(self.name, self.row, self.region)


@dataclass(frozen=True)
class Permutation:
    lhs: Cell
    rhs: Cell

    def __str__(self) -> str:
        return "copy constraint {} = {} is not satisfied".format(self.lhs, self.rhs)


Failure = ConstraintNotSatisfied | CellNotAssigned | Lookup | Permutation


class MockProver:
    # Runs a witnessed synthesis pass and checks every gate, lookup and copy constraint directly on the
    # assigned values, without any cryptography. A circuit is satisfied iff verify returns no failures.

    def __init__(self, assembly: Assembly, instance: list[list[Fld]]) -> None:
        self.assembly = assembly
        self.instance = [[v % ρ for v in column] for column in instance]

    @classmethod
    def run(cls, k: int, circuit: PlonkCircuit, instance: list[list[Fld]]) -> "MockProver":
        assembly = synthesize(k, circuit, witnessed=True)
        if len(instance) != assembly.cs.columns["instance"]:
            raise ValueError("expected {} instance columns, got {}".format(assembly.cs.columns["instance"], len(instance)))
        for column in instance:
            if len(column) > assembly.usable:
                raise ValueError("instance column has {} rows, only {} are usable".format(len(column), assembly.usable))
        return cls(assembly, instance)

    def value(self, cell: Cell) -> Fld:
        if cell.column.kind == "advice":
            return self.assembly.advice.get(cell) or 0x00
        if cell.column.kind == "fixed":
            return self.assembly.fixed.get(cell, 0x00)
        column = self.instance[cell.column.index]
        return column[cell.row] if cell.row < len(column) else 0x00

    def evaluate(self, poly: Expression, row: int) -> Fld:
        n = self.assembly.n
        return poly.evaluate(
            constant=lambda c: c,
            selector=lambda s: 0x01 if row in self.assembly.selectors.get(s, ()) else 0x00,
            query=lambda column, rotation: self.value(Cell(column, (row + rotation) % n)),
            negated=lambda x: -x % ρ,
            add=lambda x, y: (x + y) % ρ,
            mul=lambda x, y: x * y % ρ,
        )

    def verify(self) -> list[Failure]:
        assembly = self.assembly
        failures: list[Failure] = []
        for gate in assembly.cs.gates:
            for row in range(assembly.usable):
                for i, poly in enumerate(gate.polys):
                    if any(row in assembly.selectors.get(s, ()) for s in poly.selectors()):
                        for column, rotation in sorted(poly.queries()):
                            cell = Cell(column, (row + rotation) % assembly.n)
                            if column.kind == "advice" and cell not in assembly.advice:
                                failures.append(CellNotAssigned(gate.name, assembly.region_at(row), cell))
                    if self.evaluate(poly, row) != 0x00:
                        failures.append(ConstraintNotSatisfied(gate.name, i, assembly.region_at(row), row))
        for lookup in assembly.cs.lookups:
            rows = set(assembly.lookup_rows(lookup))
            for row in range(assembly.usable):
                if tuple(self.evaluate(expr, row) for expr, _ in lookup.inputs) not in rows:
                    failures.append(Lookup(lookup.name, assembly.region_at(row), row))
        for lhs, rhs in assembly.copies:
            if self.value(lhs) != self.value(rhs):
                failures.append(Permutation(lhs, rhs))
        return failures

    def assert_satisfied(self) -> None:
        failures = self.verify()
        assert not failures, "\n".join(map(str, failures))
