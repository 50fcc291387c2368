from .constraints import (
    linear_constraints,
    nonlinear_constraints,
    ConstraintContributor,
    OrderConditionConstraint,
    AbsoluteMonotonicityConstraint,
    PolynomialCoefficientConstraint,
    EmbeddedStabilityConstraint,
    NonlinearConstraintEvaluator,
)
from .objective import Objective, evaluate_objective
from .guess import initial_guess, project_guess, starting_points
from .multistart import LocalProblem, LocalRun, SearchResult, search, select_best
from .finalize import Failure, FailureKind, EnrichedMethod, ShuOsherForm, finalize
from .optimizer import OptimizerOptions, optimize
