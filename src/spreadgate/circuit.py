from typing import Iterable

from pymcl import r as ρ

from .types import Fld, Var, Gal, Gate, Func, S_Fn, M_Fn


class Circuit:
    # The Circuit class builds rank-1 constraint systems, it provides a set of methods to create entries
    # in the witness vector, add constraints of the form x * y = z, and perform linear arithmetic on the
    # variables linearly combined by the entries in the witness vector.

    wire_count: int  # dimension of the witness vector
    funcs: list[Func]  # functions to generate the witness vector entries
    stmts: dict[int, str]  # the public entries, keys are their indices in the witness vector, and values are their names
    gates: list[Gate]  # the constraints in the circuit, see the MKGATE method for details

    def __init__(self) -> None:
        self.wire_count = 0
        self.funcs = []
        self.stmts = {}
        self.gates = []
        # add a constant 1 to the witness vector
        [self.one] = self.MKWIRE(lambda getw, args: 0x01, "ONE").data

    def MKWIRE(self, func: S_Fn, name: str | None = None) -> Var:
        # Add a new entry defined by the given function to the witness vector. If name is specified, the
        # entry will be treated as public.
        i = self.wire_count
        self.funcs.append((None, func))
        self.wire_count += 1
        if name is not None:
            self.stmts[i] = name
        return Var({i: 0x01})

    def MKWIRES(self, func: M_Fn, n: int) -> list[Var]:
        # Add n new entries defined by the given function to the witness vector.
        i = self.wire_count
        self.funcs.append((n, func))
        self.wire_count += n
        return [Var({i + j: 0x01}) for j in range(n)]

    def MKGATE(self, xGal: Gal, yGal: Gal, zGal: Gal, *, msg="assertion error") -> None:
        # Add the constraint x * y = z, msg names the constraint when it is reported. Constraints with a
        # constant factor are linear, they are folded into 0 * 0 = z - x * y, and checked right away when
        # nothing variable is left.
        if isinstance(xGal, Fld) or isinstance(yGal, Fld):
            zGal = self.SUB(zGal, self.MUL(xGal, yGal))
            if isinstance(zGal, Fld):
                assert zGal == 0x00, msg
                return
            xGal = 0x00
            yGal = 0x00
        self.gates.append((xGal, yGal, zGal, msg))

    def PARAM(self, name: str, public: bool = False) -> Var:
        # Add a new entry to the witness vector, whose value is looked up by name in the args dictionary
        # when the witness is generated.
        return self.MKWIRE(lambda getw, args: args[name] % ρ, name if public else None)

    # linear arithmetic on variables

    def ADD(self, xGal: Gal, yGal: Gal) -> Gal:
        if isinstance(xGal, Fld):
            xGal = Var({self.one: xGal})
        if isinstance(yGal, Fld):
            yGal = Var({self.one: yGal})
        rGal = Var({k: v for k in xGal.data.keys() | yGal.data.keys() if (v := (xGal.data.get(k, 0x00) + yGal.data.get(k, 0x00)) % ρ)})
        return rGal.data.get(self.one, 0x00) if rGal.data.keys() <= {self.one} else rGal

    def SUB(self, xGal: Gal, yGal: Gal) -> Gal:
        if isinstance(xGal, Fld):
            xGal = Var({self.one: xGal})
        if isinstance(yGal, Fld):
            yGal = Var({self.one: yGal})
        rGal = Var({k: v for k in xGal.data.keys() | yGal.data.keys() if (v := (xGal.data.get(k, 0x00) - yGal.data.get(k, 0x00)) % ρ)})
        return rGal.data.get(self.one, 0x00) if rGal.data.keys() <= {self.one} else rGal

    def SUM(self, iLst: Iterable[Gal], rGal: Gal = 0x00) -> Gal:
        rGal = Var({self.one: rGal}) if isinstance(rGal, Fld) else Var(rGal.data.copy())
        for iGal in iLst:
            if isinstance(iGal, Fld):
                rGal.data[self.one] = rGal.data.get(self.one, 0x00) + iGal
            else:
                for k, v in iGal.data.items():
                    rGal.data[k] = rGal.data.get(k, 0x00) + v
        rGal = Var({k: t for k, v in rGal.data.items() if (t := v % ρ)})
        return rGal.data.get(self.one, 0x00) if rGal.data.keys() <= {self.one} else rGal

    def MUL(self, xGal: Gal, yGal: Gal) -> Gal:
        # Scale a variable by a constant. Selectors, fixed cells and table entries are the only factors
        # the lowering multiplies by, so a product of two variables is rejected.
        if isinstance(xGal, Fld) and isinstance(yGal, Fld):
            return xGal * yGal % ρ
        if xGal == 0x00 or yGal == 0x00:
            return 0x00
        if isinstance(yGal, Fld):
            return Var({k: v * yGal % ρ for k, v in xGal.data.items()})
        if isinstance(xGal, Fld):
            return Var({k: v * xGal % ρ for k, v in yGal.data.items()})
        raise ValueError("product of two variables is not linear")

    # assertions

    def ASSERT_EQZ(self, xGal: Gal, *, msg="EQZ assertion failed") -> None:
        self.MKGATE(0x00, 0x00, xGal, msg=msg)

    def ASSERT_IS_BOOL(self, xGal: Gal, *, msg="IS_BOOL assertion failed") -> None:
        self.MKGATE(xGal, xGal, xGal, msg=msg)

    def LOOKUP(self, xTup: tuple[Gal, ...], tSet: tuple[tuple[Fld, ...], ...], *, msg="lookup error") -> None:
        # Assert that the tuple x is one of the rows of the table t. A one-hot vector b selects the row:
        #     bᵢ * bᵢ = bᵢ,  Σᵢ bᵢ = 1,  xⱼ = Σᵢ bᵢtᵢⱼ
        # so the rows of t must be distinct. If x is not in t, no boolean vector can satisfy all three.
        if all(isinstance(xGal, Fld) for xGal in xTup):
            assert xTup in tSet, msg
            return
        bLst = self.MKWIRES(lambda getw, args: (lambda xRow: [0x01 if tRow == xRow else 0x00 for tRow in tSet])(tuple(map(getw, xTup))), len(tSet))
        for bBit in bLst:
            self.ASSERT_IS_BOOL(bBit, msg=msg)
        self.ASSERT_EQZ(self.SUB(0x01, self.SUM(bLst)), msg=msg)
        for j, xGal in enumerate(xTup):
            self.ASSERT_EQZ(self.SUB(xGal, self.SUM(self.MUL(bBit, tRow[j]) for bBit, tRow in zip(bLst, tSet))), msg=msg)
