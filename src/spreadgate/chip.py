from dataclasses import dataclass

from pymcl import r as ρ

from .plonk import CUR, NEXT, AssignedCell, Column, ConstraintSystem, Layouter, Region, Selector, Table, TableColumn
from .spread import SpreadTable
from .types import Fld, Maybe, Value


# Masks selecting the bits at even (0, 2, 4, ...) and odd (1, 3, 5, ...) positions of any field element.
EVEN_MASK = int("01" * ((ρ.bit_length() + 1) // 2), 2)
ODD_MASK = EVEN_MASK << 1


def split(x: Fld) -> tuple[Fld, Fld]:
    # Split x into its even-position bits, kept in place, and its odd-position bits, shifted down by
    # one, so that x = even + 2 * odd, for example split(0b1110) = (0b0100, 0b0101).
    return x & EVEN_MASK, (x & ODD_MASK) >> 1


def split_word(word: "Word") -> tuple[Maybe, Maybe]:
    pair = word.value.map(split)
    return pair.map(lambda eo: eo[0]), pair.map(lambda eo: eo[1])


@dataclass(frozen=True)
class Word:
    # A handle to a constrained cell holding a word, or a spread half of one.

    cell: AssignedCell

    @property
    def value(self) -> Maybe:
        return self.cell.value


@dataclass
class AndConfig:
    advice: tuple[Column, Column]
    instance: Column
    spread: TableColumn
    s_add: Selector
    s_decompose: Selector
    s_compose: Selector


class AndChip:
    # The gates of the bitwise AND circuit. Every operation lays out its own region of two rows at most:
    #
    #   | advice[0] | advice[1] | selector      |
    #   |-----------|-----------|---------------|
    #   | lhs       | rhs       | s_add / s_... |
    #   | out       |           |               |
    #
    # add enforces out = lhs + rhs, decompose and compose both enforce out = lhs + 2 * rhs, and
    # decompose additionally looks lhs and rhs up in the spread table.

    def __init__(self, config: AndConfig) -> None:
        self.config = config

    @staticmethod
    def configure(cs: ConstraintSystem, advice: tuple[Column, Column], instance: Column, constant: Column) -> AndConfig:
        cs.enable_equality(instance)
        cs.enable_constant(constant)
        for column in advice:
            cs.enable_equality(column)
        s_add = cs.selector()
        s_decompose = cs.complex_selector()
        s_compose = cs.selector()
        spread = cs.lookup_table_column()

        def linear(selector: Selector, factor: Fld):
            def gate(cs: ConstraintSystem):
                lhs = cs.query_advice(advice[0], CUR)
                rhs = cs.query_advice(advice[1], CUR)
                out = cs.query_advice(advice[0], NEXT)
                return [cs.query_selector(selector) * (lhs + rhs * factor - out)]

            return gate

        cs.create_gate("add", linear(s_add, 1))
        cs.create_gate("decompose", linear(s_decompose, 2))
        cs.create_gate("compose", linear(s_compose, 2))

        # Outside of decompose rows the inputs are 0, which is spread(0), so the lookups always hold there.
        cs.lookup("even spread", lambda cs: [(cs.query_selector(s_decompose) * cs.query_advice(advice[0], CUR), spread)])
        cs.lookup("odd spread", lambda cs: [(cs.query_selector(s_decompose) * cs.query_advice(advice[1], CUR), spread)])

        return AndConfig(advice, instance, spread, s_add, s_decompose, s_compose)

    def load_table(self, layouter: Layouter, table: SpreadTable) -> None:
        def assign(t: Table) -> None:
            for i, v in enumerate(table):
                t.assign_cell("spread row {}".format(i), self.config.spread, i, Value(v))

        layouter.assign_table("spread table", assign)

    def load_private(self, layouter: Layouter, value: Maybe) -> Word:
        config = self.config

        def assign(region: Region) -> Word:
            return Word(region.assign_advice("private input", config.advice[0], 0, value))

        return layouter.assign_region("load private", assign)

    def add(self, layouter: Layouter, a: Word, b: Word) -> Word:
        config = self.config

        def assign(region: Region) -> Word:
            region.enable_selector("add", config.s_add, 0)
            # The inputs may live anywhere in the circuit, the gate only sees cells of this region, so
            # they are copied in under equality constraints.
            a.cell.copy_advice("lhs", region, config.advice[0], 0)
            b.cell.copy_advice("rhs", region, config.advice[1], 0)
            value = a.value.zip(b.value).map(lambda ab: (ab[0] + ab[1]) % ρ)
            return Word(region.assign_advice("lhs + rhs", config.advice[0], 1, value))

        return layouter.assign_region("add", assign)

    def decompose(self, layouter: Layouter, c: Word, even: Maybe, odd: Maybe) -> tuple[Word, Word]:
        # Prove c = even + 2 * odd with both halves in the spread table. even and odd are the witnesses
        # computed by the caller, normally split_word(c); the lookups reject any other split.
        config = self.config

        def assign(region: Region) -> tuple[Word, Word]:
            region.enable_selector("decompose", config.s_decompose, 0)
            e = region.assign_advice("even bits", config.advice[0], 0, even)
            o = region.assign_advice("odd bits", config.advice[1], 0, odd)
            c.cell.copy_advice("word", region, config.advice[0], 1)
            return Word(e), Word(o)

        return layouter.assign_region("decompose", assign)

    def compose(self, layouter: Layouter, a: Word, b: Word) -> Word:
        config = self.config

        def assign(region: Region) -> Word:
            region.enable_selector("compose", config.s_compose, 0)
            a.cell.copy_advice("even bits", region, config.advice[0], 0)
            b.cell.copy_advice("odd bits", region, config.advice[1], 0)
            value = a.value.zip(b.value).map(lambda ab: (ab[0] + 2 * ab[1]) % ρ)
            return Word(region.assign_advice("even + 2 * odd", config.advice[0], 1, value))

        return layouter.assign_region("compose", assign)

    def expose_public(self, layouter: Layouter, word: Word, row: int) -> None:
        layouter.constrain_instance(word.cell.cell, self.config.instance, row)
