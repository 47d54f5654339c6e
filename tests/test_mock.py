import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from spreadgate.mock import Lookup, MockProver, Permutation
from spreadgate.plonk import synthesize
from spreadgate.topology import K, PIPELINE_ROWS, WORD_BITS, AndCircuit, min_k
from spreadgate.types import MissingWitness

from circuits import BadSplitCircuit, OddBadSplitCircuit


words = st.integers(min_value=0, max_value=2**WORD_BITS - 1)


@pytest.mark.parametrize("a, b, c", [(3, 4, 0), (7, 6, 6), (2, 3, 2), (0xFF, 0xFF, 0xFF), (0xA5, 0x5A, 0x00)])
def test_and_accepted(a, b, c):
    prover = MockProver.run(K, AndCircuit.from_ints(a, b), [[c]])
    assert prover.verify() == []
    prover.assert_satisfied()


def test_wrong_result_rejected():
    failures = MockProver.run(K, AndCircuit.from_ints(7, 6), [[7]]).verify()
    assert failures
    assert all(isinstance(failure, Permutation) for failure in failures)


@settings(max_examples=50, deadline=None)
@given(words, words)
def test_and_property(a, b):
    assert MockProver.run(K, AndCircuit.from_ints(a, b), [[a & b]]).verify() == []


@settings(max_examples=25, deadline=None)
@given(words, words, words)
def test_only_the_and_is_accepted(a, b, c):
    failures = MockProver.run(K, AndCircuit.from_ints(a, b), [[c]]).verify()
    assert (failures == []) == (c == a & b)


@pytest.mark.parametrize("a", [2, 3, 0b1010])
def test_non_spread_decomposition_rejected(a):
    failures = MockProver.run(K, BadSplitCircuit.from_ints(a, 0), [[a]]).verify()
    assert [failure.name for failure in failures] == ["even spread"]
    [failure] = failures
    assert isinstance(failure, Lookup)
    assert failure.region == "a decomposition / decompose"


def test_spread_decomposition_accepted():
    assert MockProver.run(K, BadSplitCircuit.from_ints(0b101, 0), [[0b101]]).verify() == []
    assert MockProver.run(K, OddBadSplitCircuit.from_ints(0b11, 0), [[0b11]]).verify() == []


@pytest.mark.parametrize("a", [6, 4, 0b11000])
def test_non_spread_odd_half_rejected(a):
    failures = MockProver.run(K, OddBadSplitCircuit.from_ints(a, 0), [[a]]).verify()
    assert [failure.name for failure in failures] == ["odd spread"]
    [failure] = failures
    assert isinstance(failure, Lookup)
    assert failure.region == "a decomposition / decompose"
    assert failure.row == 1


def test_missing_witness():
    with pytest.raises(MissingWitness):
        MockProver.run(K, AndCircuit(), [[0]])


def test_layout():
    assembly = synthesize(K, AndCircuit(), witnessed=False)
    assert [region.name for region in assembly.regions] == [
        "load a / load private",
        "load b / load private",
        "a decomposition / decompose",
        "b decomposition / decompose",
        "ae + be / add",
        "ao + bo / add",
        "e decomposition / decompose",
        "o decomposition / decompose",
        "compose eo and oo / compose",
    ]
    assert sum(region.rows for region in assembly.regions) == PIPELINE_ROWS == 16
    assert len(assembly.copies) == 11


def test_structure_independent_of_witness():
    structural = synthesize(K, AndCircuit(), witnessed=False)
    witnessed = synthesize(K, AndCircuit.from_ints(7, 6), witnessed=True)
    assert structural.structure() == witnessed.structure()


def test_min_k():
    assert min_k() == K
    assert min_k(16) == 9


def test_not_enough_rows():
    with pytest.raises(ValueError, match="not enough rows"):
        MockProver.run(K - 1, AndCircuit.from_ints(7, 6), [[6]])


def test_instance_shape():
    with pytest.raises(ValueError):
        MockProver.run(K, AndCircuit.from_ints(7, 6), [])
    with pytest.raises(ValueError):
        MockProver.run(K, AndCircuit.from_ints(7, 6), [[6] * 2**K])
