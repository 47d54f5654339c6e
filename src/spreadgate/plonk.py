from dataclasses import dataclass
from operator import or_
from typing import Callable, Literal, Protocol, TypeVar

from pymcl import r as ρ

from .types import Fld, Maybe, Value


T = TypeVar("T")
R = TypeVar("R")
C = TypeVar("C")


# The last rows of every column are reserved for blinding, so a circuit of size 2ᵏ can use at most
# 2ᵏ - (BLINDING_FACTORS + 1) rows for gates, tables and public inputs.
BLINDING_FACTORS = 5

CUR = 0
NEXT = 1


Kind = Literal["advice", "fixed", "instance"]


@dataclass(frozen=True, order=True)
class Column:
    kind: Kind
    index: int

    def __str__(self) -> str:
        return "{}[{}]".format(self.kind, self.index)


@dataclass(frozen=True, order=True)
class TableColumn:
    index: int

    def __str__(self) -> str:
        return "table[{}]".format(self.index)


@dataclass(frozen=True, order=True)
class Selector:
    index: int
    simple: bool = True

    def __str__(self) -> str:
        return "selector[{}]".format(self.index)


@dataclass(frozen=True, order=True)
class Cell:
    column: Column
    row: int

    def __str__(self) -> str:
        return "{}[{}]".format(self.column, self.row)


# polynomial expressions over the columns of a circuit


def lift(x: "Expression | Fld") -> "Expression":
    return x if isinstance(x, Expression) else Constant(x % ρ)


class Expression:
    # A multivariate polynomial over queried cells and selectors. Every backend consumes expressions
    # through evaluate, which folds the tree with the given leaf and node functions, so the same gate
    # can be checked numerically by the simulator and lowered to constraints by a prover.

    def __add__(self, other: "Expression | Fld") -> "Expression":
        return Sum(self, lift(other))

    def __radd__(self, other: Fld) -> "Expression":
        return Sum(lift(other), self)

    def __sub__(self, other: "Expression | Fld") -> "Expression":
        return Sum(self, Negated(lift(other)))

    def __rsub__(self, other: Fld) -> "Expression":
        return Sum(lift(other), Negated(self))

    def __mul__(self, other: "Expression | Fld") -> "Expression":
        return Product(self, lift(other))

    def __rmul__(self, other: Fld) -> "Expression":
        return Product(lift(other), self)

    def __neg__(self) -> "Expression":
        return Negated(self)

    def evaluate(
        self,
        constant: Callable[[Fld], T],
        selector: Callable[[Selector], T],
        query: Callable[[Column, int], T],
        negated: Callable[[T], T],
        add: Callable[[T, T], T],
        mul: Callable[[T, T], T],
    ) -> T:
        raise NotImplementedError

    def selectors(self) -> frozenset[Selector]:
        none = lambda *_: frozenset()
        return self.evaluate(none, lambda s: frozenset({s}), none, lambda x: x, or_, or_)

    def queries(self) -> frozenset[tuple[Column, int]]:
        none = lambda *_: frozenset()
        return self.evaluate(none, none, lambda c, r: frozenset({(c, r)}), lambda x: x, or_, or_)


@dataclass(frozen=True)
class Constant(Expression):
    value: Fld

    def evaluate(self, constant, selector, query, negated, add, mul):
        return constant(self.value)


@dataclass(frozen=True)
class Selected(Expression):
    selector: Selector

    def evaluate(self, constant, selector, query, negated, add, mul):
        return selector(self.selector)


@dataclass(frozen=True)
class Queried(Expression):
    column: Column
    rotation: int

    def evaluate(self, constant, selector, query, negated, add, mul):
        return query(self.column, self.rotation)


@dataclass(frozen=True)
class Negated(Expression):
    inner: Expression

    def evaluate(self, constant, selector, query, negated, add, mul):
        return negated(self.inner.evaluate(constant, selector, query, negated, add, mul))


@dataclass(frozen=True)
class Sum(Expression):
    lhs: Expression
    rhs: Expression

    def evaluate(self, constant, selector, query, negated, add, mul):
        return add(
            self.lhs.evaluate(constant, selector, query, negated, add, mul),
            self.rhs.evaluate(constant, selector, query, negated, add, mul),
        )


@dataclass(frozen=True)
class Product(Expression):
    lhs: Expression
    rhs: Expression

    def evaluate(self, constant, selector, query, negated, add, mul):
        return mul(
            self.lhs.evaluate(constant, selector, query, negated, add, mul),
            self.rhs.evaluate(constant, selector, query, negated, add, mul),
        )


# declaration of the constraint system


@dataclass(frozen=True)
class GateDef:
    name: str
    polys: tuple[Expression, ...]


@dataclass(frozen=True)
class LookupDef:
    name: str
    inputs: tuple[tuple[Expression, TableColumn], ...]


class ConstraintSystem:
    # Collects the columns, selectors, gates and lookup arguments of a circuit. This is everything a
    # backend needs to know before any cell is assigned, and it never depends on witness values.

    def __init__(self) -> None:
        self.columns: dict[Kind, int] = {"advice": 0, "fixed": 0, "instance": 0}
        self.num_selectors = 0
        self.num_tables = 0
        self.equality: set[Column] = set()
        self.constants: list[Column] = []
        self.gates: list[GateDef] = []
        self.lookups: list[LookupDef] = []

    def _column(self, kind: Kind) -> Column:
        column = Column(kind, self.columns[kind])
        self.columns[kind] += 1
        return column

    def advice_column(self) -> Column:
        return self._column("advice")

    def fixed_column(self) -> Column:
        return self._column("fixed")

    def instance_column(self) -> Column:
        return self._column("instance")

    def lookup_table_column(self) -> TableColumn:
        table = TableColumn(self.num_tables)
        self.num_tables += 1
        return table

    def selector(self) -> Selector:
        selector = Selector(self.num_selectors, simple=True)
        self.num_selectors += 1
        return selector

    def complex_selector(self) -> Selector:
        # complex selectors may also appear in lookup arguments
        selector = Selector(self.num_selectors, simple=False)
        self.num_selectors += 1
        return selector

    def enable_equality(self, column: Column) -> None:
        self.equality.add(column)

    def enable_constant(self, column: Column) -> None:
        if column.kind != "fixed":
            raise ValueError("constants can only be loaded from a fixed column")
        if column not in self.constants:
            self.constants.append(column)
        self.enable_equality(column)

    def query_advice(self, column: Column, rotation: int = CUR) -> Expression:
        return Queried(column, rotation)

    def query_fixed(self, column: Column, rotation: int = CUR) -> Expression:
        return Queried(column, rotation)

    def query_instance(self, column: Column, rotation: int = CUR) -> Expression:
        return Queried(column, rotation)

    def query_selector(self, selector: Selector) -> Expression:
        return Selected(selector)

    def create_gate(self, name: str, func: Callable[["ConstraintSystem"], list[Expression]]) -> None:
        polys = tuple(func(self))
        if not polys:
            raise ValueError("gate {!r} has no constraints".format(name))
        self.gates.append(GateDef(name, polys))

    def lookup(self, name: str, func: Callable[["ConstraintSystem"], list[tuple[Expression, TableColumn]]]) -> int:
        inputs = tuple(func(self))
        for expr, _ in inputs:
            if any(s.simple for s in expr.selectors()):
                raise ValueError("simple selector used in lookup {!r}".format(name))
        self.lookups.append(LookupDef(name, inputs))
        return len(self.lookups) - 1


# recording a synthesis pass


@dataclass
class RegionInfo:
    name: str
    start: int
    rows: int = 0


class Assembly:
    # Records one synthesis pass over a circuit: the regions, the enabled selectors, the assigned cells,
    # the table rows and the copy constraints. In a witnessed pass every advice value must be known and
    # absence raises MissingWitness; in a structural pass only positions are kept. Fixed and table
    # values are part of the circuit itself and must be known in both passes.

    def __init__(self, cs: ConstraintSystem, k: int, witnessed: bool) -> None:
        self.cs = cs
        self.k = k
        self.n = 1 << k
        self.usable = self.n - (BLINDING_FACTORS + 1)
        self.witnessed = witnessed
        self.regions: list[RegionInfo] = []
        self.current: RegionInfo | None = None
        self.selectors: dict[Selector, set[int]] = {}
        self.advice: dict[Cell, Fld | None] = {}
        self.fixed: dict[Cell, Fld] = {}
        self.tables: dict[TableColumn, dict[int, Fld]] = {}
        self.copies: list[tuple[Cell, Cell]] = []

    def check_row(self, row: int) -> None:
        if not 0 <= row < self.usable:
            raise ValueError("not enough rows available: row {} of {} usable rows (k = {})".format(row, self.usable, self.k))

    def enter_region(self, name: str, start: int) -> None:
        assert self.current is None, "regions cannot be nested"
        self.current = RegionInfo(name, start)

    def exit_region(self, rows: int) -> None:
        assert self.current is not None
        self.current.rows = rows
        self.regions.append(self.current)
        self.current = None

    def region_at(self, row: int) -> str | None:
        for region in self.regions:
            if region.start <= row < region.start + region.rows:
                return region.name
        return None

    def enable_selector(self, name: str, selector: Selector, row: int) -> None:
        self.check_row(row)
        self.selectors.setdefault(selector, set()).add(row)

    def assign_advice(self, name: str, column: Column, row: int, value: Maybe) -> Maybe:
        self.check_row(row)
        if column.kind != "advice":
            raise ValueError("{} is not an advice column".format(column))
        if self.witnessed:
            val = value.unwrap(name) % ρ
            self.advice[Cell(column, row)] = val
            return Value(val)
        self.advice[Cell(column, row)] = None
        return value

    def assign_fixed(self, name: str, column: Column, row: int, value: Maybe) -> Maybe:
        self.check_row(row)
        if column.kind != "fixed":
            raise ValueError("{} is not a fixed column".format(column))
        val = value.unwrap(name) % ρ
        self.fixed[Cell(column, row)] = val
        return Value(val)

    def fill_table(self, name: str, column: TableColumn, row: int, value: Maybe) -> None:
        self.check_row(row)
        self.tables.setdefault(column, {})[row] = value.unwrap(name) % ρ

    def copy(self, lhs: Cell, rhs: Cell) -> None:
        for cell in (lhs, rhs):
            self.check_row(cell.row)
            if cell.column not in self.cs.equality:
                raise ValueError("{} is not enabled for equality constraints".format(cell.column))
        self.copies.append((lhs, rhs))

    def table_rows(self, column: TableColumn) -> list[Fld]:
        # Unassigned rows at the end of a table repeat its first row, so they add no new entries.
        rows = self.tables.get(column)
        if not rows:
            raise ValueError("{} has not been assigned".format(column))
        if sorted(rows) != list(range(len(rows))):
            raise ValueError("{} has gaps between its assigned rows".format(column))
        return [rows[i] for i in range(len(rows))] + [rows[0]] * (self.usable - len(rows))

    def lookup_rows(self, lookup: LookupDef) -> tuple[tuple[Fld, ...], ...]:
        # the distinct rows of the tables a lookup reads from, in table order
        columns = [self.table_rows(table) for _, table in lookup.inputs]
        return tuple(dict.fromkeys(zip(*columns)))

    def structure(self) -> tuple:
        # Everything about the pass that does not depend on witness values; the key generation pass and
        # the proving pass of a circuit must agree on it.
        return (
            tuple((region.name, region.start, region.rows) for region in self.regions),
            tuple(sorted((s, tuple(sorted(rows))) for s, rows in self.selectors.items())),
            tuple(sorted(self.advice)),
            tuple(sorted(self.fixed.items())),
            tuple(sorted((t, tuple(sorted(rows.items()))) for t, rows in self.tables.items())),
            tuple(self.copies),
        )


# assigning cells through regions


@dataclass(frozen=True)
class AssignedCell:
    cell: Cell
    value: Maybe

    def copy_advice(self, name: str, region: "Region", column: Column, offset: int) -> "AssignedCell":
        # Assign the value into the region and constrain the new cell to equal this one.
        copied = region.assign_advice(name, column, offset, self.value)
        region.constrain_equal(self.cell, copied.cell)
        return copied


class Region:
    def __init__(self, assembly: Assembly, start: int) -> None:
        self.assembly = assembly
        self.start = start
        self.rows = 0

    def row(self, offset: int) -> int:
        self.rows = max(self.rows, offset + 1)
        return self.start + offset

    def enable_selector(self, name: str, selector: Selector, offset: int) -> None:
        self.assembly.enable_selector(name, selector, self.row(offset))

    def assign_advice(self, name: str, column: Column, offset: int, value: Maybe) -> AssignedCell:
        row = self.row(offset)
        return AssignedCell(Cell(column, row), self.assembly.assign_advice(name, column, row, value))

    def assign_fixed(self, name: str, column: Column, offset: int, value: Maybe) -> AssignedCell:
        row = self.row(offset)
        return AssignedCell(Cell(column, row), self.assembly.assign_fixed(name, column, row, value))

    def constrain_equal(self, lhs: Cell, rhs: Cell) -> None:
        self.assembly.copy(lhs, rhs)


class Table:
    def __init__(self, assembly: Assembly) -> None:
        self.assembly = assembly

    def assign_cell(self, name: str, column: TableColumn, row: int, value: Maybe) -> None:
        self.assembly.fill_table(name, column, row, value)


class Layouter:
    # A floor planner that places every region directly below the previous one. Namespaces only prefix
    # the region names and share the placement with their parent.

    def __init__(self, assembly: Assembly, path: tuple[str, ...] = (), root: "Layouter | None" = None) -> None:
        self.assembly = assembly
        self.path = path
        self.root = root or self
        self.cursor = 0

    def namespace(self, name: str) -> "Layouter":
        return Layouter(self.assembly, self.path + (name,), self.root)

    def name(self, name: str) -> str:
        return " / ".join(self.path + (name,))

    def assign_region(self, name: str, func: Callable[[Region], R]) -> R:
        start = self.root.cursor
        region = Region(self.assembly, start)
        self.assembly.enter_region(self.name(name), start)
        result = func(region)
        self.assembly.exit_region(region.rows)
        self.root.cursor = start + region.rows
        return result

    def assign_table(self, name: str, func: Callable[[Table], None]) -> None:
        func(Table(self.assembly))

    def constrain_instance(self, cell: Cell, column: Column, row: int) -> None:
        if column.kind != "instance":
            raise ValueError("{} is not an instance column".format(column))
        self.assembly.copy(cell, Cell(column, row))


class Circuit(Protocol[C]):
    def without_witnesses(self) -> "Circuit[C]": ...

    def configure(self, cs: ConstraintSystem) -> C: ...

    def synthesize(self, config: C, layouter: Layouter) -> None: ...


def synthesize(k: int, circuit: Circuit, witnessed: bool = True) -> Assembly:
    # Run one synthesis pass of the circuit on a fresh constraint system of size 2ᵏ.
    cs = ConstraintSystem()
    config = circuit.configure(cs)
    assembly = Assembly(cs, k, witnessed)
    circuit.synthesize(config, Layouter(assembly))
    return assembly
