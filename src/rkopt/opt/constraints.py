########################################################################################
##
##                    LINEAR AND NONLINEAR CONSTRAINTS OF THE SEARCH
##                                (opt/constraints.py)
##
########################################################################################

"""
OVERVIEW
--------
The constraints of a coefficient search come in two layers.

- Linear constraints depend on the method class only: structural
  equalities (weight sums, abscissae as row sums) and coordinate bounds.
- Nonlinear constraints are assembled from independent contributors,
  each adding a fixed number of equality or inequality residuals.
  Inequalities follow the scipy convention ``g(x) >= 0``.

Contributors
------------
- ``OrderConditionConstraint`` order conditions up to the requested order
- ``AbsoluteMonotonicityConstraint`` absolute monotonicity at the anchor radius
- ``PolynomialCoefficientConstraint`` pinned stability polynomial coefficients
- ``EmbeddedStabilityConstraint`` embedded stability at complex points
"""

# IMPORTS ==============================================================================

from __future__ import annotations

import numpy as np
import scipy.optimize as sci_opt

from ..methods.descriptor import decode
from ..theory.trees import trees_of_order
from ..theory.orderconditions import order_conditions
from ..theory.ssp import absolute_monotonicity, monotonicity_pattern
from ..theory.stability import stability_function, polynomial_coefficients

__all__ = [
    "linear_constraints",
    "ConstraintContributor",
    "OrderConditionConstraint",
    "AbsoluteMonotonicityConstraint",
    "PolynomialCoefficientConstraint",
    "EmbeddedStabilityConstraint",
    "NonlinearConstraintEvaluator",
    "nonlinear_constraints",
]


# LINEAR CONSTRAINTS ===================================================================

def linear_constraints(descriptor):
    """Structural linear equalities and bounds of a method class.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method

    Returns
    -------
    Aeq : array[float]
        equality matrix, ``Aeq @ x = beq``
    beq : array[float]
        equality right hand side
    lb : array[float]
        lower bounds
    ub : array[float]
        upper bounds
    """
    Aeq, beq = descriptor.method.linear_constraints()
    lb, ub = descriptor.method.bounds()
    return Aeq, beq, lb, ub


# CONTRIBUTORS =========================================================================

class ConstraintContributor:
    """Base class of nonlinear constraint contributors.

    Attributes
    ----------
    kind : str
        'eq' for equalities, 'ineq' for inequalities ``>= 0``
    size : int
        number of residuals contributed
    """

    kind = "eq"
    size = 0

    def __call__(self, coeffs):
        raise NotImplementedError


class OrderConditionConstraint(ConstraintContributor):
    """Order condition residuals up to the requested order.

    When the weight sum is already a linear equality of the class the
    first order condition is left out.
    """

    kind = "eq"

    def __init__(self, descriptor, problem_class="nonlinear"):
        self.p = descriptor.p
        self.problem_class = problem_class
        self.first = 2 if descriptor.method.linear_weight_sum else 1
        self.size = sum(
            len(trees_of_order(n, problem_class)) for n in range(self.first, self.p + 1)
            )

    def __call__(self, coeffs):
        return order_conditions(coeffs, self.p, self.problem_class, self.first)


class AbsoluteMonotonicityConstraint(ConstraintContributor):
    """Absolute monotonicity at the radius carried by the ssp anchor.

    Entries that vanish for every member of the class are dropped.
    """

    kind = "ineq"

    def __init__(self, descriptor):
        if not descriptor.is_ssp:
            raise ValueError("absolute monotonicity needs the 'ssp' objective")
        method = descriptor.method
        self.masks = monotonicity_pattern(method.pattern(), method.multistep)
        self.size = int(sum(mask.sum() for mask in self.masks))

    def __call__(self, coeffs):
        blocks = absolute_monotonicity(coeffs, coeffs.r)
        return np.concatenate([block[mask] for block, mask in zip(blocks, self.masks)])


class PolynomialCoefficientConstraint(ConstraintContributor):
    """Pin coefficients ``beta_j`` of the stability polynomial for ``j > p``.

    The pinned values are equalities, the local solvers handle them
    directly.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method
    indices : array[int]
        indices ``j`` of the pinned coefficients
    values : array[float]
        target values of the coefficients
    embedded : bool
        pin the coefficients of the embedded method instead
    """

    kind = "eq"

    def __init__(self, descriptor, indices, values, embedded=False):

        indices = np.asarray(indices, dtype=int).ravel()
        values = np.asarray(values, dtype=float).ravel()
        label = "emb_poly_coeff" if embedded else "poly_coeff"

        if len(indices) != len(values):
            raise ValueError(
                f"{label}_ind and {label}_val need the same length, "
                f"got {len(indices)} and {len(values)}"
                )
        if descriptor.method.multistep:
            raise ValueError(f"{label} pinning needs a single-step method class")
        if embedded and not descriptor.method.has_embedded:
            raise ValueError(
                f"method class '{descriptor.class_name}' has no embedded method"
                )
        if np.any(indices <= descriptor.p):
            raise ValueError(
                f"{label}_ind must exceed the order {descriptor.p}, the lower "
                f"coefficients are fixed by the order conditions"
                )

        self.indices = indices
        self.values = values
        self.embedded = embedded
        self.size = len(indices)

    def __call__(self, coeffs):
        if self.embedded:
            A, b = coeffs.Ahat, coeffs.bhat
        else:
            A, b = coeffs.A, coeffs.b
        beta = polynomial_coefficients(A, b, int(self.indices.max()))
        return beta[self.indices] - self.values


class EmbeddedStabilityConstraint(ConstraintContributor):
    """Embedded stability function bounded by one at complex points.

    Contributes ``1 - |Rhat(z)| >= 0`` for every point ``z``.
    """

    kind = "ineq"

    def __init__(self, descriptor, points):
        if not descriptor.method.has_embedded:
            raise ValueError(
                f"method class '{descriptor.class_name}' has no embedded method"
                )
        self.points = np.asarray(points, dtype=complex).ravel()
        self.size = len(self.points)

    def __call__(self, coeffs):
        return 1.0 - np.abs(stability_function(coeffs.Ahat, coeffs.bhat, self.points))


# EVALUATOR ============================================================================

class NonlinearConstraintEvaluator:
    """Collect the residuals of all contributors for a parameter vector.

    The last evaluated vector is cached so that the equality and the
    inequality callbacks of the local solver share one evaluation.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method
    contributors : list[ConstraintContributor]
        contributors in evaluation order
    """

    def __init__(self, descriptor, contributors):
        self.descriptor = descriptor
        self.contributors = list(contributors)

        self.n_eq = sum(c.size for c in self.contributors if c.kind == "eq")
        self.n_ineq = sum(c.size for c in self.contributors if c.kind == "ineq")

        self._x = None
        self._value = None


    def __len__(self):
        return len(self.contributors)


    def evaluate(self, x):
        """Equality and inequality residuals at ``x``.

        Parameters
        ----------
        x : array[float]
            parameter vector

        Returns
        -------
        eq : array[float]
            residuals that vanish at a feasible point
        ineq : array[float]
            residuals that are nonnegative at a feasible point
        """
        x = np.asarray(x, dtype=float)
        if self._x is not None and np.array_equal(x, self._x):
            return self._value

        coeffs = decode(x, self.descriptor)
        eq, ineq = [np.zeros(0)], [np.zeros(0)]
        for contributor in self.contributors:
            values = np.atleast_1d(contributor(coeffs))
            (eq if contributor.kind == "eq" else ineq).append(values)

        self._x = x.copy()
        self._value = (np.concatenate(eq), np.concatenate(ineq))
        return self._value


    def equalities(self, x):
        return self.evaluate(x)[0]


    def inequalities(self, x):
        return self.evaluate(x)[1]


    def scipy_constraints(self):
        """``NonlinearConstraint`` objects for the nonempty residual groups."""
        constraints = []
        if self.n_eq:
            constraints.append(sci_opt.NonlinearConstraint(self.equalities, 0.0, 0.0))
        if self.n_ineq:
            constraints.append(sci_opt.NonlinearConstraint(self.inequalities, 0.0, np.inf))
        return constraints


    def max_violation(self, x):
        """Largest violation of the nonlinear constraints at ``x``."""
        eq, ineq = self.evaluate(x)
        violation = np.concatenate([np.abs(eq), np.maximum(-ineq, 0.0)])
        return float(violation.max()) if len(violation) else 0.0


def nonlinear_constraints(descriptor, problem_class="nonlinear",
                          poly_coeff_ind=(), poly_coeff_val=(),
                          emb_poly_coeff_ind=(), emb_poly_coeff_val=(),
                          constrain_emb_stability=()):
    """Assemble the nonlinear constraint evaluator of a search.

    Every optional contributor is added when its controlling inputs are
    nonempty, all configuration errors are raised here.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method
    problem_class : str
        'nonlinear' or 'linear' order conditions
    poly_coeff_ind, poly_coeff_val : array
        pinned stability polynomial coefficients
    emb_poly_coeff_ind, emb_poly_coeff_val : array
        pinned coefficients of the embedded stability polynomial
    constrain_emb_stability : array[complex]
        points where the embedded method must be stable

    Returns
    -------
    evaluator : NonlinearConstraintEvaluator
    """
    contributors = [OrderConditionConstraint(descriptor, problem_class)]

    if descriptor.is_ssp:
        contributors.append(AbsoluteMonotonicityConstraint(descriptor))

    if len(poly_coeff_ind) or len(poly_coeff_val):
        contributors.append(
            PolynomialCoefficientConstraint(descriptor, poly_coeff_ind, poly_coeff_val)
            )

    if len(emb_poly_coeff_ind) or len(emb_poly_coeff_val):
        contributors.append(
            PolynomialCoefficientConstraint(
                descriptor, emb_poly_coeff_ind, emb_poly_coeff_val, embedded=True
                )
            )

    if len(constrain_emb_stability):
        contributors.append(EmbeddedStabilityConstraint(descriptor, constrain_emb_stability))

    return NonlinearConstraintEvaluator(descriptor, contributors)
