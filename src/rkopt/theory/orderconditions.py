########################################################################################
##
##                       ORDER CONDITIONS AND TRUNCATION ERRORS
##                           (theory/orderconditions.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np

from .trees import (
    trees_of_order,
    density,
    symmetry,
    order as tree_order,
    height,
    elementary_weight,
    )

from .._constants import ORDER_CHECK_TOLERANCE, ORDER_CHECK_MAX


# SINGLE-STEP METHODS ==================================================================

def _runge_kutta_residuals(coeffs, n, problem_class):
    A = np.asarray(coeffs.A, dtype=float)
    b = np.asarray(coeffs.b, dtype=float)
    cache = {}
    return np.array([
        (elementary_weight(t, A, b, cache) - 1.0/density(t)) / symmetry(t)
        for t in trees_of_order(n, problem_class)
        ])


# MULTISTEP METHODS ====================================================================

class _TreeSystem:
    """Multistep method applied with unit step to the ODE system of trees.

    Every node ``v`` of a tree carries a variable with ``v' = prod(children)``
    and ``v(0) = 0``, whose exact solution is ``t^|v| / gamma(v)``. The
    system is triangular, so even implicit stages are evaluated directly
    from the stage values of the children.

    The previous step values are taken from the exact solution while the
    previous stage derivatives come from the method itself, starting from
    zero ``steps`` steps before the final one. Any stage value of a node
    of height ``h`` is exact after ``h`` steps, so ``steps`` must exceed
    the height of the trees.
    """

    def __init__(self, coeffs, steps):
        self.D = np.asarray(coeffs.D, dtype=float)
        self.theta = np.asarray(coeffs.theta, dtype=float)
        self.A = np.asarray(coeffs.A, dtype=float)
        self.Ahat = np.asarray(coeffs.Ahat, dtype=float)
        self.b = np.asarray(coeffs.b, dtype=float)
        self.bhat = np.asarray(coeffs.bhat, dtype=float)

        s, k = self.D.shape

        #times of the step values of every simulated step
        origins = np.arange(steps, dtype=float) - (steps - 1)
        self.times = origins[:, None] + np.arange(1 - k, 1, dtype=float)[None, :]

        self.shape = (steps, s)
        self._stages = {}


    def exact(self, tree, t):
        return t**tree_order(tree) / density(tree)


    def derivatives(self, tree):
        F = np.ones(self.shape)
        for child in tree:
            F = F * self.stages(child)
        return F


    def stages(self, tree):
        if tree not in self._stages:
            F = self.derivatives(tree)
            F_prev = np.vstack([np.zeros((1, self.shape[1])), F[:-1]])
            U = self.exact(tree, self.times)
            self._stages[tree] = U @ self.D.T + F_prev @ self.Ahat.T + F @ self.A.T
        return self._stages[tree]


    def update(self, tree):
        F = self.derivatives(tree)
        U = self.exact(tree, self.times[-1])
        return self.theta @ U + self.bhat @ F[-2] + self.b @ F[-1]


def _multistep_residuals(coeffs, n, problem_class):
    trees = trees_of_order(n, problem_class)
    system = _TreeSystem(coeffs, steps=1 + max(map(height, trees), default=0))
    return np.array([
        (system.update(t) - 1.0/density(t)) / symmetry(t)
        for t in trees
        ])


# ORDER CONDITIONS =====================================================================

def tree_residuals(coeffs, n, problem_class="nonlinear"):
    """Residuals of the order conditions of order exactly ``n``.

    The residual of a tree ``t`` is ``(Phi(t) - 1/gamma(t)) / sigma(t)``,
    for multistep methods ``Phi(t)`` is the result of one step of the
    method applied to the tree system.

    Parameters
    ----------
    coeffs : CoefficientSet
        method coefficients
    n : int
        order of the conditions
    problem_class : str
        'nonlinear' for all trees, 'linear' for the tall tree only

    Returns
    -------
    residuals : array[float]
        one residual per tree
    """
    if coeffs.is_multistep:
        return _multistep_residuals(coeffs, n, problem_class)
    return _runge_kutta_residuals(coeffs, n, problem_class)


def order_conditions(coeffs, p, problem_class="nonlinear", first=1):
    """Residuals of all order conditions from order ``first`` to ``p``.

    Parameters
    ----------
    coeffs : CoefficientSet
        method coefficients
    p : int
        highest order
    problem_class : str
        'nonlinear' or 'linear'
    first : int
        lowest order, 2 skips the weight sum condition

    Returns
    -------
    residuals : array[float]
        concatenated residuals, vanish for a method of order ``p``
    """
    parts = [tree_residuals(coeffs, n, problem_class) for n in range(first, p + 1)]
    return np.concatenate(parts) if parts else np.zeros(0)


def check_order(coeffs, problem_class="nonlinear", tol=ORDER_CHECK_TOLERANCE,
                max_order=ORDER_CHECK_MAX):
    """Numerically attained order of a method.

    Parameters
    ----------
    coeffs : CoefficientSet
        method coefficients
    problem_class : str
        'nonlinear' or 'linear'
    tol : float
        largest residual that counts as satisfied
    max_order : int
        highest order that is checked

    Returns
    -------
    order : int
        largest ``q`` whose conditions up to order ``q`` all hold
    """
    for n in range(1, max_order + 1):
        residuals = tree_residuals(coeffs, n, problem_class)
        if not np.all(np.abs(residuals) <= tol):
            return n - 1
    return max_order


# TRUNCATION ERROR =====================================================================

def truncation_error(coeffs, p, problem_class="nonlinear"):
    """Leading truncation error coefficients, the residuals of order ``p+1``."""
    return tree_residuals(coeffs, p + 1, problem_class)


def errcoeff(coeffs, p, problem_class="nonlinear"):
    """2-norm of the leading truncation error coefficients of a method of order ``p``."""
    return float(np.linalg.norm(truncation_error(coeffs, p, problem_class)))
