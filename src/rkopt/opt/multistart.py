########################################################################################
##
##                        MULTI-START GLOBAL OPTIMIZATION DRIVER
##                                 (opt/multistart.py)
##
########################################################################################

"""
OVERVIEW
--------
The global search runs one local constrained solve per starting point and
selects the best local optimum. Runs are independent, so with more than
one worker they are distributed over a process pool and collected in
submission order, which makes the result independent of the number of
workers.

NOTES
-----
- A ``LocalProblem`` is handed to the workers by pickling, everything it
  holds must therefore be picklable (no closures or lambdas).
- Exit flags of local runs use the positive-is-success convention:
  1 converged and feasible, 2 line search stalled at a feasible point,
  0 iteration budget exhausted, -1 infeasible or solver failure,
  -2 numerical exception.
"""

# IMPORTS ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from concurrent.futures import ProcessPoolExecutor

import logging
import warnings

import numpy as np
import scipy.optimize as sci_opt

from ..utils.logger import LOGGER_NAME, get_logger, setup_logger

from .._constants import (
    OPT_ALGORITHMS,
    OPT_MAX_ITER,
    OPT_TOL_CON,
    OPT_TOL_FUN,
    OPT_TOL_X,
    FEASIBILITY_TOLERANCE,
    TIE_TOLERANCE,
    )


logger = get_logger(__name__)

#exceptions of the numerics that end a single run
RUN_ERRORS = (ValueError, ArithmeticError, np.linalg.LinAlgError)


# RESULTS ==============================================================================

@dataclass
class LocalRun:
    """Outcome of one local solve."""
    index: int
    x: np.ndarray | None
    fun: float
    exit_flag: int
    message: str
    nit: int = 0
    nfev: int = 0
    max_violation: float = np.inf


    @property
    def converged(self):
        return self.exit_flag > 0


@dataclass
class SearchResult:
    """Best point of a multi-start search.

    Parameters
    ----------
    x : array[float], None
        best parameter vector, None if no run produced a point
    fun : float
        objective value at ``x``
    status : int
        1 if at least one run converged, 0 if runs produced points but
        none converged, -1 if no run produced a point
    runs : list[LocalRun]
        all local runs in starting point order
    ties : int
        number of converged runs whose value ties with the best one
    """
    x: np.ndarray | None
    fun: float
    status: int
    runs: list = field(default_factory=list)
    ties: int = 0


    @property
    def n_converged(self):
        return sum(run.converged for run in self.runs)


# LOCAL PROBLEM ========================================================================

class LocalProblem:
    """Constrained local problem solved once per starting point.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method
    objective : Objective
        objective callback
    constraints : NonlinearConstraintEvaluator
        nonlinear constraints
    algorithm : str
        'sqp' (SLSQP) or 'interior-point' (trust-constr)
    solver_options : dict, None
        overrides of the default solver options
    disp : bool
        let the solver report its iterations
    """

    def __init__(self, descriptor, objective, constraints, algorithm="sqp",
                 solver_options=None, disp=False):

        try:
            self.algorithm = OPT_ALGORITHMS[algorithm]
        except KeyError:
            raise ValueError(
                f"unsupported local solver algorithm '{algorithm}', "
                f"expected one of {sorted(OPT_ALGORITHMS)}"
                ) from None

        self.descriptor = descriptor
        self.objective = objective
        self.constraints = constraints
        self.solver_options = dict(solver_options or {})
        self.disp = disp

        self.Aeq, self.beq = descriptor.method.linear_constraints()
        self.lb, self.ub = descriptor.method.bounds()


    def options(self):
        """Solver options, tight defaults updated by the overrides."""
        if self.algorithm == "SLSQP":
            options = {"maxiter": OPT_MAX_ITER, "ftol": OPT_TOL_FUN, "disp": self.disp}
        else:
            options = {
                "maxiter": OPT_MAX_ITER,
                "gtol": OPT_TOL_FUN,
                "xtol": OPT_TOL_X,
                "barrier_tol": OPT_TOL_CON,
                "verbose": 2 if self.disp else 0,
                }
        options.update(self.solver_options)
        return options


    def scipy_constraints(self):
        constraints = []
        if len(self.beq):
            constraints.append(sci_opt.LinearConstraint(self.Aeq, self.beq, self.beq))
        constraints.extend(self.constraints.scipy_constraints())
        return constraints


    def max_violation(self, x):
        """Largest violation of all constraints and bounds at ``x``."""
        violations = [
            np.abs(self.Aeq @ x - self.beq),
            np.maximum(self.lb - x, 0.0),
            np.maximum(x - self.ub, 0.0),
            [self.constraints.max_violation(x)],
            ]
        return float(max(np.max(v, initial=0.0) for v in violations))


    def _exit_flag(self, res, feasible):
        if res.success and feasible:
            return 1
        if self.algorithm == "SLSQP" and res.status == 8 and feasible:
            return 2
        if (self.algorithm == "SLSQP" and res.status == 9) or \
           (self.algorithm == "trust-constr" and res.status == 0):
            return 0
        return -1


    def solve(self, x0, index=0):
        """Run the local solver from one starting point.

        Parameters
        ----------
        x0 : array[float]
            starting vector, clipped into the bounds
        index : int
            position of the starting point

        Returns
        -------
        run : LocalRun
            outcome of the run, numerical exceptions are recorded
            with exit flag -2
        """
        x0 = np.clip(np.asarray(x0, dtype=float), self.lb, self.ub)

        kwargs = {}
        if self.algorithm == "trust-constr":
            kwargs["hess"] = sci_opt.BFGS()

        try:
            res = sci_opt.minimize(
                self.objective,
                x0=x0,
                jac=self.objective.jac,
                method=self.algorithm,
                bounds=sci_opt.Bounds(self.lb, self.ub),
                constraints=self.scipy_constraints(),
                options=self.options(),
                **kwargs
                )

            x = np.asarray(res.x, dtype=float)
            if not np.all(np.isfinite(x)):
                return LocalRun(index, None, np.inf, -1, "solver returned non-finite coefficients")

            violation = self.max_violation(x)
            fun = float(np.atleast_1d(res.fun)[0])

        except RUN_ERRORS as err:
            return LocalRun(index, None, np.inf, -2, f"{type(err).__name__}: {err}")

        return LocalRun(
            index=index,
            x=x,
            fun=fun,
            exit_flag=self._exit_flag(res, violation <= FEASIBILITY_TOLERANCE),
            message=str(res.message),
            nit=int(getattr(res, "nit", 0)),
            nfev=int(getattr(res, "nfev", 0)),
            max_violation=violation,
            )


# SELECTION ============================================================================

def select_best(runs):
    """Pick the best run of a multi-start search.

    The best converged run wins, ties within ``TIE_TOLERANCE`` are
    counted. Without converged runs the point with the smallest
    constraint violation is reported with status 0.

    Parameters
    ----------
    runs : list[LocalRun]
        all local runs

    Returns
    -------
    result : SearchResult
    """
    converged = [run for run in runs if run.converged]
    if converged:
        best = min(converged, key=lambda run: (run.fun, run.index))
        scale = max(1.0, abs(best.fun))
        ties = sum(abs(run.fun - best.fun) <= TIE_TOLERANCE * scale for run in converged)
        return SearchResult(best.x, best.fun, 1, list(runs), ties)

    usable = [run for run in runs if run.x is not None]
    if usable:
        best = min(usable, key=lambda run: (run.max_violation, run.fun, run.index))
        return SearchResult(best.x, best.fun, 0, list(runs), 0)

    return SearchResult(None, np.inf, -1, list(runs), 0)


# DRIVER ===============================================================================

def _init_worker(level, suppress_warnings):
    #workers start with fresh logging and warning state
    setup_logger(level)
    if suppress_warnings:
        warnings.simplefilter("ignore")


def search(problem, starting_points, worker_count=1, suppress_warnings=False):
    """Run the local problem from every starting point and select the best.

    Parameters
    ----------
    problem : LocalProblem
        local problem, pickled to the workers when ``worker_count > 1``
    starting_points : list[array[float]]
        starting vectors
    worker_count : int
        number of worker processes, 1 runs serially
    suppress_warnings : bool
        silence solver warnings during the search

    Returns
    -------
    result : SearchResult
    """
    points = list(starting_points)

    if worker_count > 1 and len(points) > 1:
        level = logging.getLogger(LOGGER_NAME).getEffectiveLevel()
        with ProcessPoolExecutor(
            max_workers=min(worker_count, len(points)),
            initializer=_init_worker,
            initargs=(level, suppress_warnings),
            ) as executor:
            futures = [executor.submit(problem.solve, x0, i) for i, x0 in enumerate(points)]
            runs = [future.result() for future in futures]
    else:
        with warnings.catch_warnings():
            if suppress_warnings:
                warnings.simplefilter("ignore")
            runs = [problem.solve(x0, i) for i, x0 in enumerate(points)]

    for run in runs:
        logger.debug(
            f"run {run.index}: exit flag {run.exit_flag}, f = {run.fun:.6g}, "
            f"violation = {run.max_violation:.3g}, {run.message}"
            )

    result = select_best(runs)

    logger.info(
        f"{result.n_converged} of {len(runs)} local runs converged, "
        f"status {result.status}, best f = {result.fun:.12g}"
        )
    if result.ties > 1:
        logger.info(f"{result.ties} converged runs tie at the best value")

    return result
