from spreadgate.chip import AndChip, AndConfig, Word
from spreadgate.plonk import Layouter
from spreadgate.spread import SpreadTable
from spreadgate.topology import WORD_BITS, AndCircuit
from spreadgate.types import Maybe


class BadSplitCircuit(AndCircuit):
    # Decomposes a into (a, 0) instead of its real split and exposes a. The linear relation of the
    # decompose gate holds, only the spread lookups can catch it.

    region = "a decomposition"

    def halves(self, a: Word) -> tuple[Maybe, Maybe]:
        return a.value, a.value.map(lambda _: 0)

    def synthesize(self, config: AndConfig, layouter: Layouter) -> None:
        chip = AndChip(config)
        chip.load_table(layouter.namespace("load table"), SpreadTable.build(WORD_BITS))
        a = chip.load_private(layouter.namespace("load a"), self.a)
        chip.decompose(layouter.namespace(self.region), a, *self.halves(a))
        chip.expose_public(layouter.namespace("expose a"), a, 0)


class OddBadSplitCircuit(BadSplitCircuit):
    # a = a % 2 + 2 * (a // 2), so for a = 6 the odd half is 3, which has a digit of value 3

    def halves(self, a: Word) -> tuple[Maybe, Maybe]:
        return a.value.map(lambda v: v % 2), a.value.map(lambda v: v // 2)


class RenamedSplitCircuit(BadSplitCircuit):
    # lowers to the same rank-1 system as BadSplitCircuit, only the region name differs

    region = "decomposition of a"
