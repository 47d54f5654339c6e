# The bitwise AND circuit.
#
# Given private words a and b, the circuit proves that the public input at row 0 is a & b:
#
#     ae, ao = decompose(a)       # even and odd bits of a, spread one bit per 2-bit digit
#     be, bo = decompose(b)
#     e = add(ae, be)             # every digit of e is the sum of two bits, 0, 1 or 2
#     o = add(ao, bo)
#     _, eo = decompose(e)        # odd bits of e: 1 exactly where a digit of e was 2
#     _, oo = decompose(o)
#     result = compose(eo, oo)    # even bits back at even positions, odd bits at odd positions
#
# A digit of e is 2 iff both bits of a and b at that position are 1, and since digits sit 2 bits apart
# the sums never carry into a neighbour, so eo and oo are the AND of the even and odd bits respectively.

from dataclasses import dataclass

from .chip import AndChip, AndConfig, split_word
from .plonk import BLINDING_FACTORS, ConstraintSystem, Layouter
from .spread import SpreadTable
from .types import Fld, Maybe, UNSET, known


WORD_BITS = 8
K = 5

# advice rows used by the pipeline: 2 loads, 4 decompositions, 2 additions and 1 composition
PIPELINE_ROWS = 1 * 2 + 2 * 4 + 2 * 2 + 2 * 1


def min_k(word_bits: int = WORD_BITS) -> int:
    # the smallest k whose 2ᵏ rows hold both the spread table and the pipeline
    rows = max(2 ** (word_bits // 2), PIPELINE_ROWS) + BLINDING_FACTORS + 1
    return (rows - 1).bit_length()


@dataclass
class AndCircuit:
    # The private inputs are Unset in the key generation pass and known when proving.

    a: Maybe = UNSET
    b: Maybe = UNSET

    @classmethod
    def from_ints(cls, a: Fld, b: Fld) -> "AndCircuit":
        return cls(known(a), known(b))

    def without_witnesses(self) -> "AndCircuit":
        return type(self)()

    def configure(self, cs: ConstraintSystem) -> AndConfig:
        advice = (cs.advice_column(), cs.advice_column())
        instance = cs.instance_column()
        constant = cs.fixed_column()
        return AndChip.configure(cs, advice, instance, constant)

    def synthesize(self, config: AndConfig, layouter: Layouter) -> None:
        chip = AndChip(config)
        chip.load_table(layouter.namespace("load table"), SpreadTable.build(WORD_BITS))

        a = chip.load_private(layouter.namespace("load a"), self.a)
        b = chip.load_private(layouter.namespace("load b"), self.b)

        ae, ao = chip.decompose(layouter.namespace("a decomposition"), a, *split_word(a))
        be, bo = chip.decompose(layouter.namespace("b decomposition"), b, *split_word(b))

        e = chip.add(layouter.namespace("ae + be"), ae, be)
        o = chip.add(layouter.namespace("ao + bo"), ao, bo)

        _, eo = chip.decompose(layouter.namespace("e decomposition"), e, *split_word(e))
        _, oo = chip.decompose(layouter.namespace("o decomposition"), o, *split_word(o))

        result = chip.compose(layouter.namespace("compose eo and oo"), eo, oo)

        chip.expose_public(layouter.namespace("expose a & b"), result, 0)
