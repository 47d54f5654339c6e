import argparse
import sys

import dill

from pymcl import r as ρ

from .groth16 import PKey, VKey, Proof, setup
from .mock import MockProver
from .r1cs import compile_circuit, create_proof, verify_proof
from .topology import AndCircuit, K


def fld(v: str) -> int:
    return int(v, 0) % ρ


def main():
    parser = argparse.ArgumentParser(description="Bitwise AND circuit with a mock prover and a Groth16 prover/verifier")
    parser.add_argument("-k", type=int, default=K, help="the circuit has 2^k rows (default: {})".format(K))

    subparsers = parser.add_subparsers(dest="command", required=True, help="sub-command")

    parser_mock = subparsers.add_parser("mock", help="check the constraints", description="Synthesize the circuit for the given inputs and check every constraint without generating a proof.")
    parser_mock.add_argument("-a", type=fld, required=True, help="the first private word")
    parser_mock.add_argument("-b", type=fld, required=True, help="the second private word")
    parser_mock.add_argument("-c", type=fld, default=None, help="the claimed public result (default: a & b)")

    parser_compile = subparsers.add_parser("compile", help="compile the circuit", description="Lower the circuit to rank-1 constraints and write them to a file.")
    parser_compile.add_argument("-g", "--gates", type=str, default="a.gates", help="path to write the constraints to (default: a.gates)")

    parser_setup = subparsers.add_parser("setup", help="set up the parameters", description="Set up the parameters for proving and verifying and write them to files.")
    parser_setup.add_argument("-g", "--gates", type=str, default=None, help="path to read the constraints from (default: compile the circuit)")
    parser_setup.add_argument("-p", "--pk", type=str, default="a.pk", help="path to write the parameters for proving to (default: a.pk)")
    parser_setup.add_argument("-v", "--vk", type=str, default="a.vk", help="path to write the parameters for verifying to (default: a.vk)")

    parser_prove = subparsers.add_parser("prove", help="generate a proof", description="Generate a proof and write it to a file.")
    parser_prove.add_argument("-a", type=fld, required=True, help="the first private word")
    parser_prove.add_argument("-b", type=fld, required=True, help="the second private word")
    parser_prove.add_argument("-c", type=fld, default=None, help="the claimed public result (default: a & b)")
    parser_prove.add_argument("-p", "--pk", type=str, default="a.pk", help="path to read the parameters for proving from (default: a.pk)")
    parser_prove.add_argument("-P", "--proof", type=str, default="a.proof", help="path to write the proof to (default: a.proof)")

    parser_verify = subparsers.add_parser("verify", help="verify a proof", description="Verify a proof against the expected public result.")
    parser_verify.add_argument("-c", type=fld, required=True, help="the expected public result")
    parser_verify.add_argument("-v", "--vk", type=str, default="a.vk", help="path to read the parameters for verifying from (default: a.vk)")
    parser_verify.add_argument("-P", "--proof", type=str, default="a.proof", help="path to read the proof from (default: a.proof)")

    args = parser.parse_args()

    if args.command == "mock":
        c = args.a & args.b if args.c is None else args.c
        print("Checking constraints...")
        prover = MockProver.run(args.k, AndCircuit.from_ints(args.a, args.b), [[c]])
        failures = prover.verify()
        if failures:
            print("Constraints not satisfied!")
            for failure in failures:
                print(" -", failure)
            sys.exit(1)
        print("Constraints satisfied!")
        print("Public entries: {{c = {}}}".format(c))

    elif args.command == "compile":
        print("Compiling the circuit...")
        r1cs = compile_circuit(args.k, AndCircuit())
        print("Dimension of the witness vector:", r1cs.wire_count)
        print("Number of constraints:", len(r1cs.gates))
        print("Number of public entries:", len(r1cs.stmts))
        with open(args.gates, "wb") as gates_file:
            print("Saving constraints to:", args.gates)
            gates_file.write(dill.dumps((r1cs.wire_count, list(r1cs.stmts), r1cs.gates)))

    elif args.command == "setup":
        if args.gates is not None:
            with open(args.gates, "rb") as gates_file:
                print("Loading constraints from:", args.gates)
                wire_count, skeys, gates = dill.loads(gates_file.read())
        else:
            print("Compiling the circuit...")
            r1cs = compile_circuit(args.k, AndCircuit())
            wire_count, skeys, gates = r1cs.wire_count, r1cs.stmts.keys(), r1cs.gates

        print("Setting up parameters for proving and verifying...")
        key = setup(wire_count, skeys, gates)

        with open(args.pk, "wb") as pk_file:
            print("Saving parameters for proving to:", args.pk)
            key.get_pk().dumps(pk_file)

        with open(args.vk, "wb") as vk_file:
            print("Saving parameters for verifying to:", args.vk)
            key.get_vk().dumps(vk_file)

    elif args.command == "prove":
        c = args.a & args.b if args.c is None else args.c
        print("Compiling the circuit...")
        r1cs = compile_circuit(args.k, AndCircuit())

        with open(args.pk, "rb") as pk_file:
            print("Loading parameters for proving from:", args.pk)
            pk = PKey.loads(pk_file, r1cs.wire_count, len(r1cs.gates), len(r1cs.stmts))

        print("Generating proof...")
        proof = create_proof(args.k, AndCircuit.from_ints(args.a, args.b), [[c]], r1cs, pk)

        with open(args.proof, "wb") as proof_file:
            print("Saving proof to:", args.proof)
            proof.dumps(proof_file)

    elif args.command == "verify":
        print("Compiling the circuit...")
        r1cs = compile_circuit(args.k, AndCircuit())

        with open(args.vk, "rb") as vk_file:
            print("Loading parameters for verifying from:", args.vk)
            vk = VKey.loads(vk_file, len(r1cs.stmts))

        with open(args.proof, "rb") as proof_file:
            print("Loading proof from:", args.proof)
            proof = Proof.loads(proof_file)

        print("Verifying proof...")
        if verify_proof(r1cs, vk, [[args.c]], proof):
            print("Verification passed!")
            print("Public entries: {{c = {}}}".format(args.c))
        else:
            print("Verification failed!")
            sys.exit(1)


if __name__ == "__main__":
    main()
