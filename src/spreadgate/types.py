from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, TypeVar

from pymcl import r as ρ


Fld = int


class SynthesisError(Exception):
    pass


class MissingWitness(SynthesisError):
    # Raised when a pass that needs concrete values meets an Unset one.
    pass


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Value(Generic[T]):
    # A witness value that is known in the current synthesis pass.

    val: T

    def map(self, func: Callable[[T], U]) -> "Value[U]":
        return Value(func(self.val))

    def zip(self, other: "Maybe") -> "Maybe":
        return other.map(lambda val: (self.val, val))

    def unwrap(self, what: str = "value") -> T:
        return self.val


class Unset:
    # A witness value that is absent, as in the key generation pass. Every operation on it stays absent,
    # and asking for the value raises MissingWitness.

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Unset"

    def map(self, func: Callable[[Any], Any]) -> "Unset":
        return self

    def zip(self, other: "Maybe") -> "Unset":
        return self

    def unwrap(self, what: str = "value") -> Any:
        raise MissingWitness("missing witness for {}".format(what))


UNSET = Unset()


Maybe = Value | Unset


def known(x: Fld | None) -> Maybe:
    return UNSET if x is None else Value(x % ρ)


@dataclass
class Var:
    # All variables of the rank-1 system are linear combinations of the entries in its witness vector,
    # so they can be represented by a dictionary that maps the indices of the entries in the witness
    # vector to their coefficients, for example, x = w₀ + 5w₂ + 7w₃ is {0: 1, 2: 5, 3: 7}; entries with
    # coefficient 0 are always omitted, and constants are represented by the integer itself.

    data: dict[int, Fld] = field(default_factory=lambda: {})


Gal = Var | Fld


Gate = tuple[Gal, Gal, Gal, str]
Getw = Callable[[Gal], Fld]
Args = dict[str, Fld]
S_Fn = Callable[[Getw, Args], Fld]
M_Fn = Callable[[Getw, Args], Iterable[Fld]]
Func = tuple[None, S_Fn] | tuple[int, M_Fn]


class Witness:
    def __init__(self, funcs: list[Func], args: Args) -> None:
        self.vec: list[Fld] = []
        for n, func in funcs:
            res = func(self.apply, args)
            if n is None:
                self.vec.append(res)
            else:
                res = list(res)
                assert len(res) == n
                self.vec.extend(res)

    def apply(self, xGal: Gal) -> Fld:
        return xGal if isinstance(xGal, Fld) else sum(self.vec[m] * a for m, a in xGal.data.items()) % ρ  # <w, t> = Σₘ₌₀ᴹ⁻¹ wₘtₘ
