#!/usr/bin/env python3


import time
from contextlib import contextmanager

from spreadgate.mock import MockProver
from spreadgate.r1cs import create_proof, keygen, verify_proof
from spreadgate.topology import AndCircuit, K


@contextmanager
def step(what):
    # print what the demo is doing, then how long it took once the block is done
    print(what, end=" ", flush=True)
    start = time.perf_counter()
    yield
    print("done in {:.3f} sec".format(time.perf_counter() - start))


def main():
    a = 0b0111
    b = 0b0110
    c = a & b
    with step("Checking constraints..."):
        MockProver.run(K, AndCircuit.from_ints(a, b), [[c]]).assert_satisfied()
    with step("Generating keys..."):
        r1cs, key = keygen(K, AndCircuit())
    print("Dimension of the witness vector:", r1cs.wire_count)
    print("Number of constraints:", len(r1cs.gates))
    print("Number of public entries:", len(r1cs.stmts))
    with step("Generating proof..."):
        proof = create_proof(K, AndCircuit.from_ints(a, b), [[c]], r1cs, key.get_pk())
    with step("Verifying proof..."):
        passed = verify_proof(r1cs, key.get_vk(), [[c]], proof)
    print("Verification passed!" if passed else "Verification failed!")
    with step("Verifying proof against a wrong result..."):
        passed = verify_proof(r1cs, key.get_vk(), [[c ^ 1]], proof)
    print("Verification passed!" if passed else "Verification failed!")


if __name__ == "__main__":
    main()
