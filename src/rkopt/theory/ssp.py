########################################################################################
##
##                  ABSOLUTE MONOTONICITY AND THE SHU-OSHER FORM
##                                  (theory/ssp.py)
##
########################################################################################

"""
A single-step method with Butcher matrix ``K = [[A, 0], [b^T, 0]]`` is
absolutely monotonic at ``r >= 0`` when

.. math::

    (I + rK)^{-1} e \\geq 0 \\quad\\text{and}\\quad rK (I + rK)^{-1} \\geq 0

componentwise. Multistep multistage methods are written in the general
form ``w = S x + h That F(x) + h T F(w)`` with inputs
``x = [u^(n-k+1), .., u^n, y^(n-1)]`` and unknowns ``w = [y^n, u^(n+1)]``.
With ``R = (I + rT)^-1`` they are absolutely monotonic at ``r`` when
``R (S - r That)``, ``r R That`` and ``r R T`` are nonnegative. The
radius of absolute monotonicity is the SSP coefficient of the method.
"""

# IMPORTS ==============================================================================

import numpy as np

from .._constants import AM_RADIUS_MAX, AM_RADIUS_TOL, AM_TOLERANCE


# MATRIX FORMS =========================================================================

def butcher_matrix(coeffs):
    """The ``(s+1) x (s+1)`` matrix ``K = [[A, 0], [b^T, 0]]``."""
    s = coeffs.s
    K = np.zeros((s + 1, s + 1))
    K[:s, :s] = coeffs.A
    K[s, :s] = coeffs.b
    return K


def general_form(coeffs):
    """Matrices ``S``, ``That`` and ``T`` of a multistep multistage method.

    Returns
    -------
    S : array[float]
        step value coupling ((s+1) x (k+s))
    That : array[float]
        previous stage derivative coupling ((s+1) x (k+s))
    T : array[float]
        current stage derivative coupling ((s+1) x (s+1))
    """
    s, k = coeffs.s, coeffs.k
    S = np.zeros((s + 1, k + s))
    S[:s, :k] = coeffs.D
    S[s, :k] = coeffs.theta
    That = np.zeros((s + 1, k + s))
    That[:s, k:] = coeffs.Ahat
    That[s, k:] = coeffs.bhat
    return S, That, butcher_matrix(coeffs)


# ABSOLUTE MONOTONICITY ================================================================

def absolute_monotonicity(coeffs, r):
    """Matrices that must be nonnegative for absolute monotonicity at ``r``.

    Parameters
    ----------
    coeffs : CoefficientSet
        method coefficients
    r : float
        candidate radius

    Returns
    -------
    blocks : list[array[float]]
        ``[(I+rK)^-1 e, rK(I+rK)^-1]`` for single-step methods and
        ``[R(S - r That), r R That, r R T]`` for multistep methods

    Raises
    ------
    numpy.linalg.LinAlgError
        if ``I + rK`` is singular
    """
    if coeffs.is_multistep:
        S, That, T = general_form(coeffs)
        R = np.linalg.inv(np.eye(len(T)) + r * T)
        return [R @ (S - r * That), r * R @ That, r * R @ T]

    K = butcher_matrix(coeffs)
    X = np.linalg.inv(np.eye(len(K)) + r * K)
    return [X @ np.ones(len(K)), r * K @ X]


def is_absolutely_monotonic(coeffs, r, tol=AM_TOLERANCE):
    """Check absolute monotonicity at ``r``.

    Entries above ``-tol*r`` count as nonnegative, so a method with
    radius zero is rejected already at small positive ``r``.
    """
    try:
        blocks = absolute_monotonicity(coeffs, r)
    except np.linalg.LinAlgError:
        return False
    return all(np.all(block >= -tol * r) for block in blocks)


def am_radius(coeffs, rmax=AM_RADIUS_MAX, tol=AM_RADIUS_TOL):
    """Radius of absolute monotonicity by bisection.

    The set of radii at which a method is absolutely monotonic is an
    interval ``[0, R]``, so bisection on ``[0, rmax]`` converges to ``R``.

    Parameters
    ----------
    coeffs : CoefficientSet
        method coefficients
    rmax : float
        upper end of the search interval
    tol : float
        width of the final interval

    Returns
    -------
    r : float
        largest radius found, ``rmax`` if the method is monotonic there
    """
    if is_absolutely_monotonic(coeffs, rmax):
        return float(rmax)

    lo, hi = 0.0, float(rmax)
    while hi - lo > tol:
        mid = 0.5 * (lo + hi)
        if is_absolutely_monotonic(coeffs, mid):
            lo = mid
        else:
            hi = mid
    return lo


# STRUCTURAL PATTERN ===================================================================

def _closure(P):
    #entries reachable by paths of length >= 1
    C = P.copy()
    while True:
        C_new = C | ((C.astype(int) @ P.astype(int)) > 0)
        if np.array_equal(C_new, C):
            return C
        C = C_new


def _bool_product(X, Y):
    return (X.astype(int) @ Y.astype(int)) > 0


def monotonicity_pattern(pattern, multistep):
    """Structurally nonzero entries of the absolute monotonicity blocks.

    Parameters
    ----------
    pattern : dict[str, array[bool]]
        structural pattern of the coefficients, see ``MethodClass.pattern``
    multistep : bool
        use the general multistep form

    Returns
    -------
    masks : list[array[bool]]
        one mask per block of ``absolute_monotonicity``
    """
    s = len(pattern["b"])
    T = np.zeros((s + 1, s + 1), dtype=bool)
    T[:s, :s] = pattern["A"]
    T[s, :s] = pattern["b"]
    C = _closure(T)

    if not multistep:
        return [np.ones(s + 1, dtype=bool), C]

    k = pattern["D"].shape[1]
    S = np.zeros((s + 1, k + s), dtype=bool)
    S[:s, :k] = pattern["D"]
    S[s, :k] = pattern["theta"]
    That = np.zeros((s + 1, k + s), dtype=bool)
    That[:s, k:] = pattern["Ahat"]
    That[s, k:] = pattern["bhat"]

    R = np.eye(s + 1, dtype=bool) | C
    return [_bool_product(R, S | That), _bool_product(R, That), C]


# SHU-OSHER FORM =======================================================================

def optimal_shuosher_form(coeffs, r=None):
    """Shu-Osher form of a single-step method that attains its SSP coefficient.

    With ``X = I + rK`` the form is ``beta = K X^-1``, ``alpha = r beta``
    and ``v = X^-1 e``, so that ``v + alpha e = e``.

    Parameters
    ----------
    coeffs : CoefficientSet
        single-step method coefficients
    r : float, None
        radius to use, defaults to ``am_radius(coeffs)``

    Returns
    -------
    v : array[float]
        weights of ``u^n`` (s+1)
    alpha : array[float]
        stage coupling ((s+1) x (s+1))
    beta : array[float]
        derivative coupling ((s+1) x (s+1))
    """
    if coeffs.is_multistep:
        raise ValueError("the Shu-Osher form is only defined for single-step methods")

    if r is None:
        r = am_radius(coeffs)

    K = butcher_matrix(coeffs)
    X = np.linalg.inv(np.eye(len(K)) + r * K)
    beta = K @ X
    return X @ np.ones(len(K)), r * beta, beta
