########################################################################################
##
##                    BUTCHER TABLEAU PARAMETERIZATIONS OF RK METHODS
##                               (methods/rungekutta.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np

from ._method import MethodClass
from ._coefficients import CoefficientSet

from .._constants import SDIRK_DIAGONAL_BOUNDS, IRK5_ANCHOR_GUESS, SSPDIRK5_ZERO_WEIGHTS


# BASE CLASS ===========================================================================

class ButcherRungeKutta(MethodClass):
    """Runge-Kutta methods parameterized directly by their Butcher tableau.

    The free entries of ``A`` are given by a boolean mask that is read
    row by row, so the zero pattern of each class holds by construction.
    The abscissae are free parameters tied to ``A`` by the linear
    equalities ``c_i = sum_j a_ij``.

    Parameter layout: ``[c (free entries), b, A (free entries)]``.
    """

    linear_weight_sum = True
    nonnegative = ("c", "b", "A")

    #indices of the free abscissae
    first_free_c = 0


    def __init__(self, s, k=1, ssp=False):
        self.a_mask = self._a_mask(int(s))
        super().__init__(s, k, ssp)


    def _a_mask(self, s):
        raise NotImplementedError


    def _layout(self):
        return [
            ("c", self.s - self.first_free_c),
            ("b", self.s),
            ("A", int(self.a_mask.sum())),
            ]


    def _unpack(self, blocks):
        s = self.s
        c = np.zeros(s)
        c[self.first_free_c:] = blocks["c"]
        A = np.zeros((s, s))
        A[self.a_mask] = blocks["A"]
        return CoefficientSet(A=A, b=blocks["b"].copy(), c=c)


    def _pack(self, coeffs):
        return {
            "c": coeffs.c[self.first_free_c:],
            "b": coeffs.b,
            "A": np.asarray(coeffs.A)[self.a_mask],
            }


    def _a_indices(self):
        #parameter index of every free entry of A, -1 for fixed entries
        idx = np.full((self.s, self.s), -1)
        sl = self.block("A")
        idx[self.a_mask] = np.arange(sl.start, sl.stop)
        return idx


    def _linear_rows(self):
        rows = [self._weight_sum_row()]

        idx = self._a_indices()
        c_start = self.block("c").start
        for i in range(self.first_free_c, self.s):
            row = self._row()
            row[c_start + i - self.first_free_c] = 1.0
            row[idx[i][idx[i] >= 0]] = -1.0
            rows.append((row, 0.0))

        return rows


    def pattern(self):
        return {"A": self.a_mask.copy(), "b": np.ones(self.s, dtype=bool)}


    def _guess_random(self, rng):
        s = self.s
        n_c = s - self.first_free_c
        c = np.sort(rng.random(n_c))
        b = rng.random(s)
        b[-1] = 1.0 - b[:-1].sum()
        A = rng.random(int(self.a_mask.sum()))
        return np.concatenate([c, b, A])


# SOLVERS ==============================================================================

class ExplicitRungeKutta(ButcherRungeKutta):
    """Explicit Runge-Kutta methods, strictly lower triangular ``A``.

    The first abscissa is fixed at zero, so the layout is
    ``[c_2..c_s, b, A strictly lower row-wise]``.
    """

    name = "erk"
    first_free_c = 1


    def _a_mask(self, s):
        return np.tril(np.ones((s, s), dtype=bool), -1)


    def _guess_random(self, rng):
        s = self.s
        c = np.sort(rng.random(s - 1) - 0.5)
        b = rng.random(s) - 0.5
        b[-1] = 1.0 - b[:-1].sum()
        A = rng.random(s*(s - 1)//2) - 0.5
        return np.concatenate([c, b, A])


    def _guess_smart(self, p, rng):

        #asymptotic estimate of the optimal ssp coefficient
        m = max(self.s - (p - 3), 1)
        r = max(m - np.sqrt(m), 1.0)

        s = self.s
        c = np.arange(1, s) / r
        b = np.full(s, 1.0/s)
        A = np.full(s*(s - 1)//2, 1.0/r)
        return np.concatenate([c, b, A]), -r


class ImplicitRungeKutta(ButcherRungeKutta):
    """Fully implicit Runge-Kutta methods, dense ``A``."""

    name = "irk"


    def _a_mask(self, s):
        return np.ones((s, s), dtype=bool)


    def _guess_smart(self, p, rng):
        s = self.s
        c = np.arange(1, s + 1) / s
        b = np.full(s, 1.0/s)
        A = np.tril(np.full((s, s), 1.0/s), -1) + np.eye(s)/(2*s)
        z = np.concatenate([c, b, A.ravel()])

        #perturb the deterministic guess
        z = z * (1.0 + rng.random(len(z))/4)
        return z, None


class ImplicitRungeKuttaZeroRow(ButcherRungeKutta):
    """Implicit Runge-Kutta methods whose first row of ``A`` is zero.

    Implicit SSP methods of order five and higher always have one
    vanishing row, so the first stage is ``u^n`` and ``c_1 = 0``. The
    layout is ``[c_2..c_s, b, A rows 2..s row-major]``.
    """

    name = "irk5"
    first_free_c = 1


    def _a_mask(self, s):
        mask = np.ones((s, s), dtype=bool)
        mask[:1] = False
        return mask


    def _guess_smart(self, p, rng):
        s = self.s
        c = np.arange(1, s) / s
        b = np.full(s, 1.0/s)
        A = np.tril(np.full((s, s), 1.0/s), -1) + np.eye(s)/(2*s)
        z = np.concatenate([c, b, A[self.a_mask]])
        z = z * (1.0 + rng.random(len(z))/4)
        return z, IRK5_ANCHOR_GUESS


class DiagonallyImplicitRungeKutta(ButcherRungeKutta):
    """Diagonally implicit Runge-Kutta methods, lower triangular ``A``."""

    name = "dirk"


    def _a_mask(self, s):
        return np.tril(np.ones((s, s), dtype=bool))


    def _guess_smart(self, p, rng):
        s = self.s
        c = np.arange(1, s + 1) / s
        b = np.full(s, 1.0/s)
        A = np.tril(np.full((s, s), 1.0/s), -1) + np.eye(s)/(2*s)
        z = np.concatenate([c, b, A[self.a_mask]])
        z = z * (1.0 + rng.random(len(z))/10)

        r = (s - (p - 2) + np.sqrt(max(s**2 - (p - 2), 0))) / 2
        return z, -r


class DiagonallyImplicitRungeKuttaZeroRow(ButcherRungeKutta):
    """Diagonally implicit Runge-Kutta methods with ``a_11 = 0``.

    The first stage of these SSP methods is explicit, so ``c_1 = 0``
    and the layout is ``[c_2..c_s, b, A lower row-wise without a_11]``.
    """

    name = "sspdirk5"
    first_free_c = 1


    def _a_mask(self, s):
        mask = np.tril(np.ones((s, s), dtype=bool))
        mask[0, 0] = False
        return mask


    def _guess_random(self, rng):
        s = self.s
        c = np.sort(rng.random(s - 1))
        b = rng.random(s) / s
        b[-1] = 1.0 - b[:-1].sum()
        A = rng.random(int(self.a_mask.sum())) / 3
        return np.concatenate([c, b, A])


    def _guess_smart(self, p, rng):
        s = self.s

        #second order like weights with the last ones zeroed
        n_zero = min(SSPDIRK5_ZERO_WEIGHTS, s - 1)
        b = np.full(s, 1.0/(s - n_zero))
        b[s - n_zero:] = 0.0
        b[0] /= 2

        A = np.tril(np.full((s, s), 1.0/s))
        A[1:, 0] = 1.0/(2*s)
        A[2:, 1] = 3.0/(2*s)
        A[np.diag_indices(s)] = 1.0/(2*s)

        z = np.concatenate([np.arange(1, s) / s, b, A[self.a_mask]])
        z = z * (1.0 + rng.random(len(z))/10)
        return z, None


class SinglyDiagonallyImplicitRungeKutta(ButcherRungeKutta):
    """Singly diagonally implicit Runge-Kutta methods.

    All diagonal entries of ``A`` share one parameter ``gamma`` that is
    bounded to ``SDIRK_DIAGONAL_BOUNDS``. The layout is
    ``[c, b, gamma, A strictly lower row-wise]``.
    """

    name = "sdirk"
    nonnegative = ("c", "b", "gamma", "A")


    def _a_mask(self, s):
        return np.tril(np.ones((s, s), dtype=bool), -1)


    def _layout(self):
        return [
            ("c", self.s),
            ("b", self.s),
            ("gamma", 1),
            ("A", self.s*(self.s - 1)//2),
            ]


    def _unpack(self, blocks):
        coeffs = super()._unpack(blocks)
        np.fill_diagonal(coeffs.A, blocks["gamma"][0])
        return coeffs


    def _pack(self, coeffs):
        blocks = super()._pack(coeffs)
        blocks["gamma"] = [np.asarray(coeffs.A)[0, 0]]
        return blocks


    def _linear_rows(self):
        rows = super()._linear_rows()

        #the diagonal enters every row sum
        g = self.block("gamma").start
        for row, _ in rows[1:]:
            row[g] = -1.0

        return rows


    def _restrict_bounds(self, lb, ub):
        g = self.block("gamma")
        lb[g] = np.maximum(lb[g], SDIRK_DIAGONAL_BOUNDS[0])
        ub[g] = np.minimum(ub[g], SDIRK_DIAGONAL_BOUNDS[1])


    def pattern(self):
        return {"A": np.tril(np.ones((self.s, self.s), dtype=bool)),
                "b": np.ones(self.s, dtype=bool)}


    def _guess_random(self, rng):
        s = self.s
        c = np.sort(rng.random(s))
        b = rng.random(s) / s
        b[-1] = 1.0 - b[:-1].sum()
        gamma = rng.random(1) / (3*s)
        A = rng.random(s*(s - 1)//2) / s
        return np.concatenate([c, b, gamma, A])
