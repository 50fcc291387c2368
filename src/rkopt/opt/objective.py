########################################################################################
##
##                         OBJECTIVES OF THE COEFFICIENT SEARCH
##                                 (opt/objective.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np

from ..methods.descriptor import decode
from ..theory.orderconditions import truncation_error


# FUNCTIONS ============================================================================

def evaluate_objective(x, descriptor, problem_class="nonlinear"):
    """Objective value and, where available, its gradient.

    For 'ssp' the value is the anchor ``x[-1] = -r``, so minimizing it
    maximizes the SSP coefficient, and the gradient is the last unit
    vector. For 'acc' the value is the 2-norm of the leading truncation
    error coefficients and no gradient is available.

    Parameters
    ----------
    x : array[float]
        parameter vector
    descriptor : MethodDescriptor
        description of the method
    problem_class : str
        'nonlinear' or 'linear' truncation error

    Returns
    -------
    value : float
        objective value
    gradient : array[float], None
        gradient for 'ssp', None for 'acc'
    """
    x = np.asarray(x, dtype=float)

    if descriptor.objective == "ssp":
        gradient = np.zeros(len(x))
        gradient[-1] = 1.0
        return float(x[-1]), gradient

    if descriptor.objective == "acc":
        coeffs = decode(x, descriptor)
        tau = truncation_error(coeffs, descriptor.p, problem_class)
        return float(np.linalg.norm(tau)), None

    raise ValueError(f"unrecognized objective '{descriptor.objective}'")


# CLASS ================================================================================

class Objective:
    """Objective callback for ``scipy.optimize.minimize``.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method
    problem_class : str
        'nonlinear' or 'linear'
    """

    def __init__(self, descriptor, problem_class="nonlinear"):
        self.descriptor = descriptor
        self.problem_class = problem_class


    @property
    def jac(self):
        """The ``jac`` argument of ``minimize`` matching ``__call__``."""
        return True if self.descriptor.objective == "ssp" else "3-point"


    def __call__(self, x):
        value, gradient = evaluate_objective(x, self.descriptor, self.problem_class)
        if gradient is None:
            return value
        return value, gradient
