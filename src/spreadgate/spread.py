from typing import Iterator

from .types import Fld


def spread(i: int) -> Fld:
    # Place bit c of i at bit 2c of the result, leaving every odd position zero, for example
    # spread(0b11) = 0b101. The map is strictly increasing, hence injective.
    r = 0
    c = 0
    while i > 0:
        if i & 0x01:
            r += 4**c
        i >>= 1
        c += 1
    return r


class SpreadTable:
    # The lookup table of all spread values of half-width words. A value below 2 ** bits is a member iff
    # every 2-bit digit slot of it holds 0 or 1, so one lookup proves a whole word is bitwise split.

    def __init__(self, bits: int, rows: tuple[Fld, ...]) -> None:
        self.bits = bits
        self.rows = rows
        self.index = {v: i for i, v in enumerate(rows)}

    @classmethod
    def build(cls, bits: int) -> "SpreadTable":
        if bits <= 0 or bits % 2 != 0:
            raise ValueError("word width must be a positive even number")
        return cls(bits, tuple(spread(i) for i in range(2 ** (bits // 2))))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Fld]:
        return iter(self.rows)

    def __getitem__(self, i: int) -> Fld:
        return self.rows[i]

    def __contains__(self, v: object) -> bool:
        return v in self.index

    def __repr__(self) -> str:
        return "SpreadTable(bits={}, rows={})".format(self.bits, len(self.rows))
