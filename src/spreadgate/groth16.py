import multiprocessing
import random
from dataclasses import dataclass
from typing import TypeVar, Iterable, BinaryIO

from pymcl import Fr, G1, G2, pairing, g1, g2, r as ρ

from . import fft
from .types import Witness, Gate, Fld


Gn = TypeVar("Gn", G1, G2)


# group exponentiations are spread over a process pool


THREADS = None  # None means one process per CPU core


def worker(Group: type[Gn], p: str, z: str) -> str:
    return str(Group(p) * Fr(z))


def scalar_mult_parallel(P: Gn, Zs: Iterable[Fld]) -> list[Gn]:
    # [P * z for z in Zs]
    Group = type(P)
    with multiprocessing.Pool(THREADS) as pool:
        return [Group(q) for q in pool.starmap(worker, ((Group, str(P), str(Z)) for Z in Zs))]


def dot_prod_parallel(O: Gn, Ps: Iterable[Gn], Zs: Iterable[Fld]) -> Gn:
    # O + Σᵢ Pᵢ * zᵢ
    Group = type(O)
    with multiprocessing.Pool(THREADS) as pool:
        return sum((Group(q) for q in pool.starmap(worker, ((Group, str(P), str(Z)) for P, Z in zip(Ps, Zs, strict=True)))), O)


def fr(x: Fld) -> Fr:
    return Fr(str(x % ρ))


def domain_size(gate_count: int) -> int:
    # the smallest power of 2 that is not less than the number of constraints
    return 1 << (gate_count - 1).bit_length()


L1 = len(g1.serialize())
L2 = len(g2.serialize())


def read_g1(file: BinaryIO, n: int) -> list[G1]:
    return [G1.deserialize(file.read(L1)) for _ in range(n)]


def read_g2(file: BinaryIO, n: int) -> list[G2]:
    return [G2.deserialize(file.read(L2)) for _ in range(n)]


def write_all(file: BinaryIO, points: Iterable[G1 | G2]) -> None:
    for point in points:
        file.write(point.serialize())


@dataclass
class PKey:
    α1: G1
    β1: G1
    δ1: G1
    β2: G2
    δ2: G2
    v1V: list[G1]
    x1I: list[G1]
    x2I: list[G2]
    y1I: list[G1]

    def dumps(self, file: BinaryIO) -> None:
        write_all(file, [self.α1, self.β1, self.δ1, self.β2, self.δ2])
        write_all(file, self.v1V)
        write_all(file, self.x1I)
        write_all(file, self.x2I)
        write_all(file, self.y1I)

    @staticmethod
    def loads(file: BinaryIO, wire_count: int, gate_count: int, stmt_count: int) -> "PKey":
        V = wire_count - stmt_count
        I = domain_size(gate_count)
        [α1, β1, δ1] = read_g1(file, 3)
        [β2, δ2] = read_g2(file, 2)
        return PKey(α1, β1, δ1, β2, δ2, v1V=read_g1(file, V), x1I=read_g1(file, I), x2I=read_g2(file, I), y1I=read_g1(file, I))


@dataclass
class VKey:
    α1: G1
    β2: G2
    γ2: G2
    δ2: G2
    u1U: list[G1]

    def dumps(self, file: BinaryIO) -> None:
        write_all(file, [self.α1, self.β2, self.γ2, self.δ2])
        write_all(file, self.u1U)

    @staticmethod
    def loads(file: BinaryIO, stmt_count: int) -> "VKey":
        [α1] = read_g1(file, 1)
        [β2, γ2, δ2] = read_g2(file, 3)
        return VKey(α1, β2, γ2, δ2, u1U=read_g1(file, stmt_count))


@dataclass
class Key:
    pk: PKey
    vk: VKey

    def get_pk(self) -> PKey:
        return self.pk

    def get_vk(self) -> VKey:
        return self.vk


@dataclass
class Proof:
    # The public entries are not part of the proof, the verifier supplies the values it expects.

    A1: G1
    B2: G2
    C1: G1

    def dumps(self, file: BinaryIO) -> None:
        write_all(file, [self.A1, self.B2, self.C1])

    @staticmethod
    def loads(file: BinaryIO) -> "Proof":
        [A1] = read_g1(file, 1)
        [B2] = read_g2(file, 1)
        [C1] = read_g1(file, 1)
        return Proof(A1, B2, C1)


def setup(wire_count: int, skeys: Iterable[int], gates: list[Gate]) -> Key:
    skeys = list(skeys)
    α = random.randrange(1, ρ)
    β = random.randrange(1, ρ)
    γ = random.randrange(1, ρ)
    δ = random.randrange(1, ρ)
    τ = random.randrange(1, ρ)
    M = wire_count
    I = domain_size(len(gates))
    p = fft.pru(I, ρ)
    # Aₘ(τ), Bₘ(τ), Cₘ(τ) are the Lagrange interpolations of the m-th columns of the constraint
    # matrices evaluated at τ. With Lᵢ the i-th Lagrange basis polynomial over the powers of p,
    #     Aₘ(τ) = Σᵢ Lᵢ(τ)aᵢₘ
    # and [Lᵢ(τ) for i in range(I)] is exactly the inverse DFT of [τ⁰, τ¹, ..., τᴵ⁻¹]. The matrices are
    # sparse, so summing over their non-zero entries costs O(M) after an O(IlogI) transform.
    XI = fft.ifft(list(fft.pows(τ, I, ρ)), p, ρ)
    AτM = [0x00] * M
    BτM = [0x00] * M
    CτM = [0x00] * M
    for X, (aM, bM, cM, msg) in zip(XI, gates):
        for TτM, gal in ((AτM, aM), (BτM, bM), (CτM, cM)):
            for m, a in [(0, gal)] if isinstance(gal, int) else gal.data.items():
                TτM[m] += X * a
    Zτ = pow(τ, I, ρ) - 0x01  # Z(τ), where Z(X) = Πᵢ₌₀ᴵ⁻¹ (X - pⁱ) = Xᴵ - 1
    Γ = pow(γ, -1, ρ)
    Δ = pow(δ, -1, ρ)
    KτM = [(β * AτM[m] + α * BτM[m] + CτM[m]) % ρ for m in range(M)]
    pk = PKey(
        α1=g1 * fr(α),
        β1=g1 * fr(β),
        δ1=g1 * fr(δ),
        β2=g2 * fr(β),
        δ2=g2 * fr(δ),
        v1V=scalar_mult_parallel(g1, (KτM[m] * Δ % ρ for m in range(M) if m not in skeys)),
        x1I=scalar_mult_parallel(g1, fft.pows(τ, I, ρ)),
        x2I=scalar_mult_parallel(g2, fft.pows(τ, I, ρ)),
        y1I=scalar_mult_parallel(g1, (x * Δ * Zτ % ρ for x in fft.pows(τ, I, ρ))),
    )
    vk = VKey(
        α1=pk.α1,
        β2=pk.β2,
        γ2=g2 * fr(γ),
        δ2=pk.δ2,
        u1U=scalar_mult_parallel(g1, (KτM[m] * Γ % ρ for m in skeys)),
    )
    return Key(pk, vk)


def prove(wire_count: int, skeys: Iterable[int], gates: list[Gate], pk: PKey, witness: Witness) -> Proof:
    # No constraint is checked here: a witness that violates any of them yields a quotient H that is
    # not a polynomial identity, and the proof is rejected by verify.
    skeys = list(skeys)
    r = random.randrange(1, ρ)
    s = random.randrange(1, ρ)
    N = len(gates)
    M = wire_count
    I = domain_size(N)
    J = I * 2
    p = fft.pru(I, ρ)
    q = fft.pru(J, ρ)
    vV = [witness.vec[m] for m in range(M) if m not in skeys]
    awN = [witness.apply(aM) for aM, bM, cM, msg in gates]
    bwN = [witness.apply(bM) for aM, bM, cM, msg in gates]
    cwN = [witness.apply(cM) for aM, bM, cM, msg in gates]
    # A(X), B(X), C(X) interpolate the per-constraint values on the powers of p. Z vanishes there, so
    # H = (A * B - C) / Z is computed on the coset q * pⁱ instead, where Z(q * pⁱ) = qᴵ - 1 = -2.
    AwI = fft.ifft(awN + [0x00] * (I - N), p, ρ)
    BwI = fft.ifft(bwN + [0x00] * (I - N), p, ρ)
    CwI = fft.ifft(cwN + [0x00] * (I - N), p, ρ)
    awI, bwI, cwI = (fft.fft([W * k % ρ for k, W in zip(fft.pows(q, I, ρ), WI, strict=True)], p, ρ) for WI in (AwI, BwI, CwI))
    hI = [(ρ - 1) // 2 * (aw * bw - cw) % ρ for aw, bw, cw in zip(awI, bwI, cwI, strict=True)]
    HI = [H * k % ρ for k, H in zip(fft.pows(pow(q, -1, ρ), I, ρ), fft.ifft(hI, p, ρ), strict=True)]
    A1 = dot_prod_parallel(pk.α1 + pk.δ1 * fr(r), pk.x1I, AwI)
    B1 = dot_prod_parallel(pk.β1 + pk.δ1 * fr(s), pk.x1I, BwI)
    B2 = dot_prod_parallel(pk.β2 + pk.δ2 * fr(s), pk.x2I, BwI)
    C1 = A1 * fr(s) + B1 * fr(r) - pk.δ1 * fr(r * s)
    C1 = dot_prod_parallel(C1, pk.y1I, HI)
    C1 = dot_prod_parallel(C1, pk.v1V, vV)
    return Proof(A1=A1, B2=B2, C1=C1)


def verify(vk: VKey, public: list[Fld], proof: Proof) -> bool:
    # public holds the values of the public entries in the order they were declared
    if len(public) != len(vk.u1U):
        raise ValueError("expected {} public entries, got {}".format(len(vk.u1U), len(public)))
    D1 = dot_prod_parallel(G1(), vk.u1U, public)
    return pairing(proof.A1, proof.B2) == pairing(vk.α1, vk.β2) * pairing(D1, vk.γ2) * pairing(proof.C1, vk.δ2)
