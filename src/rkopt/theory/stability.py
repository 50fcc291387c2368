########################################################################################
##
##                     STABILITY FUNCTIONS OF RUNGE-KUTTA METHODS
##                               (theory/stability.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np


# FUNCTIONS ============================================================================

def stability_function(A, b, z):
    """Evaluate ``R(z) = 1 + z b^T (I - zA)^-1 e`` at complex points.

    Parameters
    ----------
    A : array[float]
        stage coupling matrix
    b : array[float]
        stage weights
    z : complex, array[complex]
        evaluation points

    Returns
    -------
    R : array[complex]
        values of the stability function, same shape as ``z``
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float)
    z = np.asarray(z, dtype=complex)

    I, e = np.eye(len(b)), np.ones(len(b))
    values = [1.0 + zi * (b @ np.linalg.solve(I - zi * A, e)) for zi in z.ravel()]
    return np.array(values, dtype=complex).reshape(z.shape)


def polynomial_coefficients(A, b, n):
    """Coefficients ``beta_j = b^T A^(j-1) e`` of the stability function.

    These are the elementary weights of the tall trees and the
    coefficients of ``z^j`` in the series of the stability function.

    Parameters
    ----------
    A : array[float]
        stage coupling matrix
    b : array[float]
        stage weights
    n : int
        highest index

    Returns
    -------
    beta : array[float]
        ``[beta_0, .., beta_n]`` with ``beta_0 = 1``
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float)

    beta = np.ones(n + 1)
    v = np.ones(len(b))
    for j in range(1, n + 1):
        beta[j] = b @ v
        v = A @ v
    return beta
