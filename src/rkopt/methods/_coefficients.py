########################################################################################
##
##                        STRUCTURED COEFFICIENT SET OF A METHOD
##                             (methods/_coefficients.py)
##
########################################################################################

# IMPORTS ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np


# CLASS ================================================================================

@dataclass(eq=False)
class CoefficientSet:
    """Decoded coefficients of a Runge-Kutta type method.

    Every method class populates the Butcher coefficients ``A``, ``b``
    and ``c``. The remaining fields are only set by the classes that
    carry them and stay ``None`` otherwise.

    For single-step classes ``Ahat``, ``bhat`` and ``chat`` describe the
    embedded method (low-storage classes with an embedded pair). For
    multistep-multistage classes ``Ahat`` and ``bhat`` couple the stage
    derivatives of the previous step, ``D`` couples the stage values to
    the ``k`` previous step values and ``theta`` weights the step values
    in the update.

    Parameters
    ----------
    A : array[float]
        stage coupling matrix (s x s)
    b : array[float]
        stage weights (s)
    c : array[float]
        abscissae (s)
    Ahat : array[float], None
        embedded / previous-step stage coupling matrix (s x s)
    bhat : array[float], None
        embedded / previous-step weights (s)
    chat : array[float], None
        abscissae of the embedded method (s)
    alpha : array[float], None
        subdiagonal of the 2R low-storage form
    beta : array[float], None
        derivative weights of the 2S / 3S* low-storage forms
    gamma1 : array[float], None
        register S1 weights of the low-storage forms
    gamma2 : array[float], None
        register S2 weights of the low-storage forms
    gamma3 : array[float], None
        register S3 weights of the 3S* low-storage forms
    delta : array[float], None
        register S2 accumulation weights of the 2S / 3S* forms
    D : array[float], None
        step coupling matrix of multistep methods (s x k)
    theta : array[float], None
        step weights of multistep methods (k)
    r : float, None
        candidate SSP coefficient carried by ssp-objective vectors
    """

    A: np.ndarray
    b: np.ndarray
    c: np.ndarray
    Ahat: np.ndarray | None = None
    bhat: np.ndarray | None = None
    chat: np.ndarray | None = None
    alpha: np.ndarray | None = None
    beta: np.ndarray | None = None
    gamma1: np.ndarray | None = None
    gamma2: np.ndarray | None = None
    gamma3: np.ndarray | None = None
    delta: np.ndarray | None = None
    D: np.ndarray | None = None
    theta: np.ndarray | None = None
    r: float | None = None


    @property
    def s(self):
        """Number of stages."""
        return len(self.b)


    @property
    def k(self):
        """Number of steps."""
        return 1 if self.D is None else self.D.shape[1]


    @property
    def is_multistep(self):
        return self.D is not None


    def items(self):
        """Iterate over the populated fields as ``(name, value)`` pairs."""
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                yield f.name, value


    def allclose(self, other, rtol=0.0, atol=0.0):
        """Compare two coefficient sets field by field.

        With the default tolerances this is an exact comparison.

        Parameters
        ----------
        other : CoefficientSet
            coefficient set to compare against
        rtol : float
            relative tolerance
        atol : float
            absolute tolerance

        Returns
        -------
        equal : bool
            True if the same fields are populated and all agree
        """
        for f in fields(self):
            a, b = getattr(self, f.name), getattr(other, f.name)
            if (a is None) != (b is None):
                return False
            if a is None:
                continue
            a, b = np.asarray(a), np.asarray(b)
            if a.shape != b.shape or not np.allclose(a, b, rtol=rtol, atol=atol):
                return False
        return True
