########################################################################################
##
##                    OPTIMIZATION OF RUNGE-KUTTA METHOD COEFFICIENTS
##                                 (opt/optimizer.py)
##
########################################################################################

"""
OVERVIEW
--------
Entry point of the coefficient search. ``optimize`` finds the coefficients
of a method with ``s`` stages and order ``p`` in a given class that either
maximize the SSP coefficient ('ssp') or minimize the leading truncation
error ('acc').

The search goes through these stages:

1. resolve the method class and assemble constraints and objective,
   every configuration error is raised here
2. generate starting points, optionally projected onto the order
   conditions
3. run the multi-start search, serially or on a process pool
4. validate the best point and compute the method properties
5. optionally write an eligible method to a text file

Example
-------
.. code-block:: python

    from rkopt import optimize

    method = optimize(3, 3, "erk", "ssp", starting_point_count=5, seed=1)
    if method:
        print(method.r, method.coefficients.A)
"""

# IMPORTS ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field, replace
from numbers import Integral
from typing import Any, Sequence

import warnings

import numpy as np

from ..methods.descriptor import MethodDescriptor
from ..utils.logger import VERBOSITY_LEVELS, get_logger, set_verbosity
from ..utils.report import write_method

from .constraints import nonlinear_constraints
from .objective import Objective
from .guess import START_MODES, starting_points
from .multistart import LocalProblem, search
from .finalize import finalize

from .._constants import OPT_ALGORITHMS, DEFAULT_ALGORITHMS, DEFAULT_STARTING_POINTS

__all__ = ["OptimizerOptions", "optimize", "PROBLEM_CLASSES"]


logger = get_logger(__name__)

PROBLEM_CLASSES = ("nonlinear", "linear")


# OPTIONS ==============================================================================

@dataclass
class OptimizerOptions:
    """Configuration of a coefficient search.

    Parameters
    ----------
    step_count : int
        number of steps, only multistep classes accept more than one
    starting_point_count : int
        total number of local runs
    worker_count : int
        number of worker processes for the local runs
    start_mode : str, array[float]
        'random', 'smart' or an explicit starting vector
    solve_order_conditions_first : bool
        project every starting point onto the order conditions
    poly_coeff_ind : sequence[int]
        indices ``j > p`` of pinned stability polynomial coefficients
    poly_coeff_val : sequence[float]
        values of the pinned coefficients
    emb_poly_coeff_ind : sequence[int]
        indices of pinned coefficients of the embedded method
    emb_poly_coeff_val : sequence[float]
        values of the pinned embedded coefficients
    constrain_emb_stability : sequence[complex]
        points where the embedded method has to be stable
    local_solver_algorithm : str, None
        'sqp' or 'interior-point', None picks 'sqp' for the 'ssp'
        objective and 'interior-point' for 'acc'
    min_ssp_radius : float
        smallest SSP coefficient that is accepted, exclusive
    display_verbosity : str
        'off', 'notify', 'final' or 'iter'
    problem_class : str
        'nonlinear' for all order conditions, 'linear' for the
        conditions of linear problems only
    seed : int, None
        root seed of the starting points, None for fresh entropy
    solver_options : dict, None
        overrides of the local solver options
    suppress_warnings : bool
        silence warnings of the local solver
    write_to_file : bool
        write eligible methods to a text file
    output_dir : str
        directory of the written files
    append_time : bool
        append a timestamp to the file name
    """

    step_count: int = 1
    starting_point_count: int = DEFAULT_STARTING_POINTS
    worker_count: int = 1
    start_mode: Any = "random"
    solve_order_conditions_first: bool = False
    poly_coeff_ind: Sequence[int] = ()
    poly_coeff_val: Sequence[float] = ()
    emb_poly_coeff_ind: Sequence[int] = ()
    emb_poly_coeff_val: Sequence[float] = ()
    constrain_emb_stability: Sequence[complex] = ()
    local_solver_algorithm: str | None = None
    min_ssp_radius: float = 0.0
    display_verbosity: str = "notify"
    problem_class: str = "nonlinear"
    seed: int | None = None
    solver_options: dict | None = field(default=None)
    suppress_warnings: bool = False
    write_to_file: bool = False
    output_dir: str = "."
    append_time: bool = True


    def __post_init__(self):

        for name in ("step_count", "starting_point_count", "worker_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral) or value < 1:
                raise ValueError(f"'{name}' must be a positive integer, got {value}")

        if isinstance(self.start_mode, str):
            if self.start_mode not in START_MODES:
                raise ValueError(
                    f"unknown start mode '{self.start_mode}', "
                    f"expected one of {START_MODES} or a vector"
                    )
        else:
            self.start_mode = np.array(self.start_mode, dtype=float)
            if self.start_mode.ndim != 1:
                raise ValueError("an explicit start mode must be a one dimensional vector")

        if self.local_solver_algorithm is not None and \
           self.local_solver_algorithm not in OPT_ALGORITHMS:
            raise ValueError(
                f"unsupported local solver algorithm '{self.local_solver_algorithm}', "
                f"expected one of {sorted(OPT_ALGORITHMS)}"
                )
        if self.display_verbosity not in VERBOSITY_LEVELS:
            raise ValueError(
                f"unknown display verbosity '{self.display_verbosity}', "
                f"expected one of {sorted(VERBOSITY_LEVELS)}"
                )
        if self.problem_class not in PROBLEM_CLASSES:
            raise ValueError(
                f"unknown problem class '{self.problem_class}', expected one of {PROBLEM_CLASSES}"
                )


    def algorithm_for(self, objective):
        """Local solver algorithm used for ``objective``.

        The truncation error norm is not smooth at its minimum, where
        SLSQP tends to stall, so 'acc' defaults to 'interior-point'.
        """
        if self.local_solver_algorithm is not None:
            return self.local_solver_algorithm
        return DEFAULT_ALGORITHMS[objective]


# OPTIMIZE =============================================================================

def optimize(s, p, class_name="erk", objective="ssp", options=None, **kwargs):
    """Search for optimal coefficients of a Runge-Kutta type method.

    Parameters
    ----------
    s : int
        number of stages
    p : int
        order of accuracy
    class_name : str
        method class, see ``rkopt.methods.METHOD_CLASSES``
    objective : str
        'ssp' to maximize the SSP coefficient, 'acc' to minimize the
        leading truncation error
    options : OptimizerOptions, None
        search configuration
    kwargs : dict
        fields of ``OptimizerOptions``, applied on top of ``options``

    Returns
    -------
    result : EnrichedMethod, Failure
        the accepted method or a falsy ``Failure`` with the reason

    Raises
    ------
    ValueError
        on configuration errors, before any optimization work
    """
    if options is None:
        options = OptimizerOptions(**kwargs)
    elif kwargs:
        options = replace(options, **kwargs)

    set_verbosity(options.display_verbosity)

    descriptor = MethodDescriptor(class_name, s, p, options.step_count, objective)

    constraints = nonlinear_constraints(
        descriptor,
        problem_class=options.problem_class,
        poly_coeff_ind=options.poly_coeff_ind,
        poly_coeff_val=options.poly_coeff_val,
        emb_poly_coeff_ind=options.emb_poly_coeff_ind,
        emb_poly_coeff_val=options.emb_poly_coeff_val,
        constrain_emb_stability=options.constrain_emb_stability,
        )

    algorithm = options.algorithm_for(objective)

    problem = LocalProblem(
        descriptor,
        Objective(descriptor, options.problem_class),
        constraints,
        algorithm=algorithm,
        solver_options=options.solver_options,
        disp=options.display_verbosity == "iter",
        )

    logger.info(
        f"searching '{class_name}' with s={s}, p={p}, k={options.step_count} "
        f"for objective '{objective}' from {options.starting_point_count} starting points "
        f"with the {algorithm} solver"
        )

    with warnings.catch_warnings():
        if options.suppress_warnings:
            warnings.simplefilter("ignore")

        points = starting_points(
            descriptor,
            options.starting_point_count,
            mode=options.start_mode,
            seed=options.seed,
            project=options.solve_order_conditions_first,
            problem_class=options.problem_class,
            )

        result = search(
            problem,
            points,
            worker_count=options.worker_count,
            suppress_warnings=options.suppress_warnings,
            )

        method = finalize(
            result.x,
            descriptor,
            result.status,
            min_ssp_radius=options.min_ssp_radius,
            problem_class=options.problem_class,
            )

    if not method:
        logger.warning(method.reason)
        return method

    if method.eligible:
        logger.info(f"the method found has order of accuracy {method.attained_order}")
    else:
        logger.warning(
            f"the method found has order of accuracy {method.attained_order} "
            f"(wanted {p}), it is not written to disk"
            )
    if objective == "ssp":
        logger.info(f"SSP coefficient r = {method.r:.15g}")
    if method.errcoeff is not None:
        logger.info(f"leading error coefficient {method.errcoeff:.6e}")

    if options.write_to_file and method.eligible:
        path = write_method(method, options.output_dir, options.append_time)
        logger.info(f"method written to '{path}'")

    return method
