########################################################################################
##
##                       INITIAL GUESSES FOR THE LOCAL SOLVER
##                                  (opt/guess.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np
import scipy.optimize as sci_opt

from ..methods.descriptor import decode
from ..theory.orderconditions import order_conditions
from ..utils.logger import get_logger

from .._constants import (
    FEASIBILITY_TOLERANCE,
    PROJECTION_TOLERANCE,
    PROJECTION_MAX_NFEV,
    )


logger = get_logger(__name__)

START_MODES = ("random", "smart")


# GUESSES ==============================================================================

def initial_guess(descriptor, mode="random", rng=None):
    """One starting parameter vector.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method
    mode : str, array[float]
        'random', 'smart' or an explicit vector that is passed through
    rng : numpy.random.Generator, int, None
        random number generator or seed

    Returns
    -------
    x : array[float]
        parameter vector
    """
    if not isinstance(mode, str):
        x = np.array(mode, dtype=float)
        if x.ndim != 1 or len(x) != descriptor.n_params:
            raise ValueError(
                f"explicit starting vector needs length {descriptor.n_params}, "
                f"got shape {x.shape}"
                )
        return x

    if mode not in START_MODES:
        raise ValueError(f"unknown start mode '{mode}', expected one of {START_MODES}")

    rng = np.random.default_rng(rng)
    return descriptor.method.initial_guess(mode, rng, descriptor.p)


def project_guess(x, descriptor, problem_class="nonlinear"):
    """Move a guess towards the order condition manifold.

    Solves the structural equalities together with the order conditions
    in the least squares sense. Non-convergence is not an error, the
    partially projected vector is still a usable starting point.

    Parameters
    ----------
    x : array[float]
        starting vector
    descriptor : MethodDescriptor
        description of the method
    problem_class : str
        'nonlinear' or 'linear'

    Returns
    -------
    x : array[float]
        projected vector, the input if the solve failed outright
    converged : bool
        True if the residuals were driven below the feasibility tolerance
    """
    x = np.asarray(x, dtype=float)
    method = descriptor.method
    Aeq, beq = method.linear_constraints()
    first = 2 if method.linear_weight_sum else 1

    def residuals(z):
        coeffs = decode(z, descriptor)
        return np.concatenate([
            Aeq @ z - beq,
            order_conditions(coeffs, descriptor.p, problem_class, first),
            ])

    try:
        res = sci_opt.least_squares(
            residuals,
            x0=x,
            method="trf",
            ftol=PROJECTION_TOLERANCE,
            xtol=PROJECTION_TOLERANCE,
            gtol=PROJECTION_TOLERANCE,
            max_nfev=PROJECTION_MAX_NFEV,
            )
    except (ValueError, ArithmeticError, np.linalg.LinAlgError) as err:
        logger.warning(f"projection of the starting point failed ({err}), using it unprojected")
        return x, False

    if not np.all(np.isfinite(res.x)):
        logger.warning("projection diverged, using the unprojected starting point")
        return x, False

    converged = bool(res.success) and float(np.max(np.abs(res.fun), initial=0.0)) <= FEASIBILITY_TOLERANCE
    if not converged:
        logger.warning(f"projection did not converge ({res.message}), using the partial result")

    return res.x, converged


def starting_points(descriptor, count, mode="random", seed=None, project=False,
                    problem_class="nonlinear"):
    """Starting vectors of a multi-start search.

    Every starting point draws from its own random stream spawned from
    ``seed``, so the points are independent and reproducible whatever
    the number of workers that later consume them.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method
    count : int
        number of starting points
    mode : str, array[float]
        'random', 'smart' or an explicit vector
    seed : int, None
        root seed, None draws fresh entropy
    project : bool
        project every point towards the order condition manifold
    problem_class : str
        'nonlinear' or 'linear'

    Returns
    -------
    points : list[array[float]]
        starting vectors
    """
    streams = np.random.SeedSequence(seed).spawn(count)

    points = []
    for stream in streams:
        x = initial_guess(descriptor, mode, np.random.default_rng(stream))
        if project:
            x, _ = project_guess(x, descriptor, problem_class)
        points.append(x)

    return points
