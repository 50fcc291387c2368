########################################################################################
##
##                      LOW-STORAGE RUNGE-KUTTA PARAMETERIZATIONS
##                               (methods/lowstorage.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np

from ._method import MethodClass
from ._coefficients import CoefficientSet


# 2R METHODS ===========================================================================

class TwoRegister(MethodClass):
    """Williamson type 2R low-storage methods.

    Only the subdiagonal of ``A`` and the weights are free, every entry
    left of the subdiagonal equals the weight of its column,
    ``a_ij = b_j`` for ``j < i-1`` and ``a_i,i-1 = alpha_i``. The
    layout is ``[alpha_2..alpha_s, b]``.
    """

    name = "2R"
    linear_weight_sum = True
    nonnegative = ("alpha", "b")


    def _layout(self):
        return [("alpha", self.s - 1), ("b", self.s)]


    def _unpack(self, blocks):
        s = self.s
        alpha, b = blocks["alpha"].copy(), blocks["b"].copy()
        A = np.zeros((s, s))
        for i in range(1, s):
            A[i, :i-1] = b[:i-1]
            A[i, i-1] = alpha[i-1]
        return CoefficientSet(A=A, b=b, c=A.sum(axis=1), alpha=alpha)


    def _pack(self, coeffs):
        return {"alpha": coeffs.alpha, "b": coeffs.b}


    def _linear_rows(self):
        return [self._weight_sum_row()]


    def pattern(self):
        return {"A": np.tril(np.ones((self.s, self.s), dtype=bool), -1),
                "b": np.ones(self.s, dtype=bool)}


# REGISTER RECURRENCES =================================================================

class RegisterRecurrence(MethodClass):
    """Ketcheson type low-storage methods with two or three registers.

    The stages are generated by the register updates

    .. code::

        S2 := S2 + delta_(i-1) S1            (2S, 3S*)
        S2 := u^n                             (2S*)
        S3 := u^n                             (3S*)
        S1 := gamma1_i S1 + gamma2_i S2 + gamma3_i S3 + beta_i h F(S1)

    for ``i = 2..s+1`` starting from ``S1 = u^n``. The weights ``gamma1``
    are not free, they make every stage a consistent combination of
    ``u^n``. Registers are tracked as coefficient vectors
    ``[u^n, hF(y_1), .., hF(y_s)]``, which yields the Butcher tableau.

    Layout: ``[beta, gamma2_3..gamma2_(s+1), (gamma3_3..), (delta_2..delta_s),
    (embedded deltas)]``. At ``i = 2`` the register weights are fixed.
    """

    nonnegative = ("beta",)

    accumulate = True     # S2 accumulates the stages
    three_registers = False
    n_embedded = 0        # number of trailing embedded deltas


    def _layout(self):
        s = self.s
        layout = [("beta", s), ("gamma2", s - 1)]
        if self.three_registers:
            layout.append(("gamma3", s - 1))
        if self.accumulate:
            layout.append(("delta", s - 1))
        if self.n_embedded:
            layout.append(("delta_emb", self.n_embedded))
        return layout


    @property
    def has_embedded(self):
        return self.n_embedded > 0


    def _registers(self, blocks):
        s = self.s

        beta = blocks["beta"].copy()
        gamma2 = np.concatenate([[1.0 if self.accumulate else 0.0], blocks["gamma2"]])
        gamma3 = np.zeros(s)
        if self.three_registers:
            gamma3[1:] = blocks["gamma3"]

        delta = None
        if self.accumulate:
            delta = np.concatenate([[1.0], blocks["delta"]])
            if self.n_embedded:
                delta = np.concatenate([delta, blocks["delta_emb"]])

        return beta, gamma2, gamma3, delta


    def _unpack(self, blocks):
        s = self.s
        beta, gamma2, gamma3, delta = self._registers(blocks)

        u = np.zeros(s + 1)
        u[0] = 1.0

        S1, S2, S3 = u.copy(), np.zeros(s + 1), u.copy()
        gamma1 = np.zeros(s)
        stages = []

        for i in range(s):
            stages.append(S1.copy())

            if self.accumulate:
                S2 = S2 + delta[i] * S1
            else:
                S2 = u.copy()

            #consistency fixes the weight of the S1 register
            gamma1[i] = 1.0 - gamma2[i] * S2[0] - gamma3[i] * S3[0]

            S1 = gamma1[i] * S1 + gamma2[i] * S2 + gamma3[i] * S3
            S1[i+1] += beta[i]

        A = np.array([y[1:] for y in stages])
        c = A.sum(axis=1)

        coeffs = CoefficientSet(
            A=A, b=S1[1:].copy(), c=c,
            beta=beta, gamma1=gamma1, gamma2=gamma2, delta=delta,
            )
        if self.three_registers:
            coeffs.gamma3 = gamma3

        if self.n_embedded:
            uhat = S2 + delta[s] * S1
            if self.three_registers:
                uhat = uhat + delta[s+1] * S3
            uhat = uhat / delta.sum()
            coeffs.Ahat, coeffs.bhat, coeffs.chat = A.copy(), uhat[1:], c.copy()

        return coeffs


    def _pack(self, coeffs):
        s = self.s
        blocks = {"beta": coeffs.beta, "gamma2": coeffs.gamma2[1:]}
        if self.three_registers:
            blocks["gamma3"] = coeffs.gamma3[1:]
        if self.accumulate:
            blocks["delta"] = coeffs.delta[1:s]
        if self.n_embedded:
            blocks["delta_emb"] = coeffs.delta[s:]
        return blocks


    def pattern(self):
        return {"A": np.tril(np.ones((self.s, self.s), dtype=bool), -1),
                "b": np.ones(self.s, dtype=bool)}


# SOLVERS ==============================================================================

class TwoS(RegisterRecurrence):
    """2S low-storage methods, two registers accumulating the stages."""

    name = "2S"


class TwoSStar(RegisterRecurrence):
    """2S* low-storage methods, the second register keeps ``u^n``."""

    name = "2S*"
    accumulate = False


class ThreeSStar(RegisterRecurrence):
    """3S* low-storage methods, 2S plus a register that keeps ``u^n``."""

    name = "3S*"
    three_registers = True


class TwoSEmbedded(TwoS):
    """2S methods with an embedded method built from the registers.

    The embedded solution is
    ``(S2 + delta_(s+1) S1) / sum(delta)`` after the last stage.
    """

    name = "2S_emb"
    n_embedded = 1


class ThreeSStarEmbedded(ThreeSStar):
    """3S* methods with an embedded method built from the registers.

    The embedded solution is
    ``(S2 + delta_(s+1) S1 + delta_(s+2) S3) / sum(delta)`` after the
    last stage.
    """

    name = "3S*_emb"
    n_embedded = 2
