import pytest

from spreadgate.spread import SpreadTable, spread


def test_spread_small_values():
    assert [spread(i) for i in range(4)] == [0b0, 0b1, 0b100, 0b101]
    assert spread(0b1111) == 0b01010101


def test_spread_leaves_odd_bits_zero():
    for i in range(256):
        assert spread(i) & int("10" * 8, 2) == 0


def test_spread_is_strictly_increasing():
    values = [spread(i) for i in range(256)]
    assert all(x < y for x, y in zip(values, values[1:]))


def test_table_rows():
    table = SpreadTable.build(8)
    assert len(table) == 16
    assert list(table) == [spread(i) for i in range(16)]
    assert table[3] == 0b101
    assert 0b1010101 in table
    assert 0b10 not in table
    assert 0b11 not in table


@pytest.mark.parametrize("bits", [0, -2, 7])
def test_table_rejects_bad_widths(bits):
    with pytest.raises(ValueError):
        SpreadTable.build(bits)
