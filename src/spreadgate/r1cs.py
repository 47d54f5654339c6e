from pymcl import r as ρ

from . import groth16
from .circuit import Circuit
from .plonk import Assembly, Cell, Column, Expression, synthesize
from .plonk import Circuit as PlonkCircuit
from .types import Args, Fld, Gal, Witness


def cell_name(cell: Cell) -> str:
    return "{}[{}]".format(cell.column, cell.row)


class Lowering(Circuit):
    # Lowers one recorded synthesis pass to a rank-1 constraint system that Groth16 can prove:
    #   - every assigned advice cell becomes a private wire, every instance cell bound by a copy
    #     constraint becomes a public wire,
    #   - every gate polynomial is asserted to vanish on every usable row, with selectors, fixed cells
    #     and unassigned cells turned into constants (rows where a gate is switched off vanish
    #     trivially and produce no constraint),
    #   - every lookup input row is matched against the distinct rows of its table,
    #   - every copy constraint becomes a linear equality.
    # Only positions are read from the assembly, never advice values, so the key generation pass and
    # the proving pass lower to the same constraints.

    def __init__(self, assembly: Assembly) -> None:
        super().__init__()
        self.assembly = assembly
        self.cells: dict[Cell, Gal] = {}
        self.publics: list[Cell] = []
        for cell in sorted(assembly.advice):
            self.cells[cell] = self.PARAM(cell_name(cell))
        for cell in sorted({cell for copy in assembly.copies for cell in copy if cell.column.kind == "instance"}):
            self.cells[cell] = self.PARAM(cell_name(cell), public=True)
            self.publics.append(cell)
        for gate in assembly.cs.gates:
            for row in range(assembly.usable):
                for i, poly in enumerate(gate.polys):
                    self.ASSERT_EQZ(self.evaluate(poly, row), msg="gate {!r} (constraint {}) at row {}".format(gate.name, i, row))
        for lookup in assembly.cs.lookups:
            tSet = assembly.lookup_rows(lookup)
            for row in range(assembly.usable):
                xTup = tuple(self.evaluate(expr, row) for expr, _ in lookup.inputs)
                self.LOOKUP(xTup, tSet, msg="lookup {!r} at row {}".format(lookup.name, row))
        for lhs, rhs in assembly.copies:
            self.ASSERT_EQZ(self.SUB(self.query(lhs), self.query(rhs)), msg="copy {} = {}".format(lhs, rhs))

    def query(self, cell: Cell) -> Gal:
        if cell.column.kind == "fixed":
            return self.assembly.fixed.get(cell, 0x00)
        return self.cells.get(cell, 0x00)

    def evaluate(self, poly: Expression, row: int) -> Gal:
        n = self.assembly.n
        return poly.evaluate(
            constant=lambda c: c % ρ,
            selector=lambda s: 0x01 if row in self.assembly.selectors.get(s, ()) else 0x00,
            query=lambda column, rotation: self.query(Cell(column, (row + rotation) % n)),
            negated=lambda x: self.SUB(0x00, x),
            add=self.ADD,
            mul=self.MUL,
        )

    def public_inputs(self, instance: list[list[Fld]]) -> list[Fld]:
        # The values of the public entries in the order of stmts: the constant 1, then the bound
        # instance cells.
        return [0x01] + [instance_value(instance, cell) for cell in self.publics]

    def same_as(self, other: "Lowering") -> bool:
        # Same layout of the recorded passes, and the same rank-1 system lowered from them.
        if self.assembly.structure() != other.assembly.structure():
            return False
        return self.wire_count == other.wire_count and self.stmts == other.stmts and self.gates == other.gates


def instance_value(instance: list[list[Fld]], cell: Cell) -> Fld:
    column = instance[cell.column.index] if cell.column.index < len(instance) else []
    return column[cell.row] % ρ if cell.row < len(column) else 0x00


def witness_args(lowered: Lowering, instance: list[list[Fld]]) -> Args:
    # Name every witness value of a witnessed pass the way PARAM expects to find it.
    args = {cell_name(cell): val for cell, val in lowered.assembly.advice.items()}
    for cell in lowered.publics:
        args[cell_name(cell)] = instance_value(instance, cell)
    return args


def compile_circuit(k: int, circuit: PlonkCircuit) -> Lowering:
    return Lowering(synthesize(k, circuit.without_witnesses(), witnessed=False))


def keygen(k: int, circuit: PlonkCircuit) -> tuple[Lowering, groth16.Key]:
    r1cs = compile_circuit(k, circuit)
    return r1cs, groth16.setup(r1cs.wire_count, r1cs.stmts.keys(), r1cs.gates)


def create_proof(k: int, circuit: PlonkCircuit, instance: list[list[Fld]], r1cs: Lowering, pk: groth16.PKey) -> groth16.Proof:
    # The instance is the public input the prover claims. If the witness does not satisfy the circuit
    # for it, the proof is still produced but will not verify.
    lowered = Lowering(synthesize(k, circuit, witnessed=True))
    if not lowered.same_as(r1cs):
        raise ValueError("the circuit structure differs from the one the key was generated for")
    witness = Witness(lowered.funcs, witness_args(lowered, instance))
    return groth16.prove(lowered.wire_count, lowered.stmts.keys(), lowered.gates, pk, witness)


def verify_proof(r1cs: Lowering, vk: groth16.VKey, instance: list[list[Fld]], proof: groth16.Proof) -> bool:
    return groth16.verify(vk, r1cs.public_inputs(instance), proof)
