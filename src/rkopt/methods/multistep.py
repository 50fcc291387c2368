########################################################################################
##
##                MULTISTEP MULTISTAGE RUNGE-KUTTA PARAMETERIZATIONS
##                              (methods/multistep.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np

from ._method import MethodClass
from ._coefficients import CoefficientSet


# BASE CLASS ===========================================================================

class MultistepRungeKutta(MethodClass):
    """Multistep multistage Runge-Kutta methods with ``k`` steps.

    One step of the method reads

    .. math::

        y^n = D u + h \\hat{A} F(y^{n-1}) + h A F(y^n)

        u^{n+1} = \\theta^T u + h \\hat{b}^T F(y^{n-1}) + h b^T F(y^n)

    where ``u = [u^(n-k+1), .., u^n]`` holds the previous step values and
    ``y^(n-1)`` the stage values of the previous step.

    Type 1 methods have free first stages. Type 2 methods fix the first
    stage to ``u^n``, so the first rows of ``D``, ``Ahat`` and ``A`` are
    not read from the parameter vector.

    Layout: ``[D, theta, Ahat, bhat, A, b]`` with every matrix read row
    by row over its free entries.
    """

    multistep = True
    nonnegative = ("D", "theta", "Ahat", "bhat", "A", "b")

    #'explicit', 'implicit' or 'diagonal'
    implicitness = "explicit"
    first_stage_fixed = False


    def __init__(self, s, k=2, ssp=False):
        s = int(s)
        self.a_mask = self._a_mask(s)
        self.ahat_mask = np.ones((s, s), dtype=bool)
        self.d_mask = np.ones((s, int(k)), dtype=bool)
        if self.first_stage_fixed:
            for mask in (self.a_mask, self.ahat_mask, self.d_mask):
                mask[:1] = False
        super().__init__(s, k, ssp)


    def _check_counts(self):
        if self.k < 2:
            raise ValueError(
                f"multistep class '{self.name}' needs at least 2 steps, got {self.k}"
                )


    def _a_mask(self, s):
        ones = np.ones((s, s), dtype=bool)
        if self.implicitness == "explicit":
            return np.tril(ones, -1)
        if self.implicitness == "diagonal":
            return np.tril(ones)
        return ones


    def _layout(self):
        return [
            ("D", int(self.d_mask.sum())),
            ("theta", self.k),
            ("Ahat", int(self.ahat_mask.sum())),
            ("bhat", self.s),
            ("A", int(self.a_mask.sum())),
            ("b", self.s),
            ]


    @property
    def tau(self):
        """Times of the previous step values relative to ``t_n`` in steps."""
        return np.arange(1 - self.k, 1, dtype=float)


    def _unpack(self, blocks):
        s, k = self.s, self.k

        D = np.zeros((s, k))
        if self.first_stage_fixed:
            D[0, -1] = 1.0
        D[self.d_mask] = blocks["D"]

        Ahat = np.zeros((s, s))
        Ahat[self.ahat_mask] = blocks["Ahat"]

        A = np.zeros((s, s))
        A[self.a_mask] = blocks["A"]

        c = D @ self.tau + Ahat.sum(axis=1) + A.sum(axis=1)

        return CoefficientSet(
            A=A, b=blocks["b"].copy(), c=c,
            Ahat=Ahat, bhat=blocks["bhat"].copy(),
            D=D, theta=blocks["theta"].copy(),
            )


    def _pack(self, coeffs):
        return {
            "D": np.asarray(coeffs.D)[self.d_mask],
            "theta": coeffs.theta,
            "Ahat": np.asarray(coeffs.Ahat)[self.ahat_mask],
            "bhat": coeffs.bhat,
            "A": np.asarray(coeffs.A)[self.a_mask],
            "b": coeffs.b,
            }


    def _linear_rows(self):
        rows = []

        #step values enter every stage consistently
        idx = np.full((self.s, self.k), -1)
        sl = self.block("D")
        idx[self.d_mask] = np.arange(sl.start, sl.stop)
        for i in range(self.s):
            if not self.d_mask[i].any():
                continue
            row = self._row()
            row[idx[i][idx[i] >= 0]] = 1.0
            rows.append((row, 1.0))

        rows.append(self._weight_sum_row("theta"))
        return rows


    def pattern(self):
        D = self.d_mask.copy()
        if self.first_stage_fixed:
            D[0, -1] = True
        return {
            "A": self.a_mask.copy(),
            "b": np.ones(self.s, dtype=bool),
            "Ahat": self.ahat_mask.copy(),
            "bhat": np.ones(self.s, dtype=bool),
            "D": D,
            "theta": np.ones(self.k, dtype=bool),
            }


# SOLVERS ==============================================================================

class ExplicitMultistepType1(MultistepRungeKutta):
    name = "emsrk1"


class ExplicitMultistepType2(MultistepRungeKutta):
    name = "emsrk2"
    first_stage_fixed = True


class ImplicitMultistepType1(MultistepRungeKutta):
    name = "imsrk1"
    implicitness = "implicit"


class ImplicitMultistepType2(MultistepRungeKutta):
    name = "imsrk2"
    implicitness = "implicit"
    first_stage_fixed = True


class DiagonallyImplicitMultistepType1(MultistepRungeKutta):
    name = "dimsrk1"
    implicitness = "diagonal"


class DiagonallyImplicitMultistepType2(MultistepRungeKutta):
    name = "dimsrk2"
    implicitness = "diagonal"
    first_stage_fixed = True
