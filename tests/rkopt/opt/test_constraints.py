########################################################################################
##
##                                  TESTS FOR
##                              'opt/constraints.py'
##
########################################################################################

# IMPORTS ==============================================================================

import unittest

import numpy as np

from rkopt.methods import CoefficientSet, MethodDescriptor, encode
from rkopt.opt.constraints import (
    linear_constraints,
    OrderConditionConstraint,
    AbsoluteMonotonicityConstraint,
    PolynomialCoefficientConstraint,
    EmbeddedStabilityConstraint,
    NonlinearConstraintEvaluator,
    nonlinear_constraints,
    )


# HELPERS ==============================================================================

SSPRK33 = CoefficientSet(
    A=np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.25, 0.25, 0.0]]),
    b=np.array([1/6, 1/6, 2/3]),
    c=np.array([0.0, 1.0, 0.5]),
    r=1.0,
    )


class CountingContributor(OrderConditionConstraint):
    """Order conditions that count their evaluations."""

    def __init__(self, descriptor):
        super().__init__(descriptor)
        self.calls = 0

    def __call__(self, coeffs):
        self.calls += 1
        return super().__call__(coeffs)


# TESTS ================================================================================

class TestLinear(unittest.TestCase):
    """Test the linear constraint layer."""

    def test_shapes(self):
        d = MethodDescriptor("erk", 4, 3)
        Aeq, beq, lb, ub = linear_constraints(d)
        self.assertEqual(Aeq.shape[1], d.n_params)
        self.assertEqual(len(beq), Aeq.shape[0])
        self.assertEqual(len(lb), d.n_params)
        self.assertEqual(len(ub), d.n_params)


class TestContributors(unittest.TestCase):
    """Test the individual nonlinear constraint contributors."""

    def test_order_conditions_skip_weight_sum(self):
        #erk has the weight sum as a linear equality
        c = OrderConditionConstraint(MethodDescriptor("erk", 3, 3))
        self.assertEqual(c.size, 3)
        self.assertEqual(len(c(SSPRK33)), 3)
        np.testing.assert_allclose(c(SSPRK33), 0, atol=1e-15)

        #2S does not
        c = OrderConditionConstraint(MethodDescriptor("2S", 3, 3))
        self.assertEqual(c.size, 4)

    def test_order_conditions_linear_class(self):
        c = OrderConditionConstraint(MethodDescriptor("erk", 4, 4), "linear")
        self.assertEqual(c.size, 3)

    def test_monotonicity_at_anchor(self):
        d = MethodDescriptor("erk", 3, 3)
        c = AbsoluteMonotonicityConstraint(d)
        values = c(SSPRK33)
        self.assertEqual(len(values), c.size)
        self.assertGreaterEqual(values.min(), -1e-14)

        SSPRK33.r = 1.5
        try:
            self.assertLess(c(SSPRK33).min(), 0.0)
        finally:
            SSPRK33.r = 1.0

    def test_monotonicity_needs_ssp(self):
        with self.assertRaises(ValueError):
            AbsoluteMonotonicityConstraint(MethodDescriptor("erk", 3, 3, objective="acc"))

    def test_polynomial_coefficients(self):
        d = MethodDescriptor("erk", 4, 3)
        c = PolynomialCoefficientConstraint(d, [4], [1/48])
        ssprk34 = CoefficientSet(
            A=np.array([[0, 0, 0, 0], [0.5, 0, 0, 0], [0.5, 0.5, 0, 0], [1/6, 1/6, 1/6, 0]]),
            b=np.array([1/6, 1/6, 1/6, 0.5]),
            c=np.array([0.0, 0.5, 1.0, 0.5]),
            )
        np.testing.assert_allclose(c(ssprk34), [0.0], atol=1e-16)

    def test_polynomial_errors(self):
        d = MethodDescriptor("erk", 4, 3)
        with self.assertRaises(ValueError):
            PolynomialCoefficientConstraint(d, [4, 5], [0.1])
        with self.assertRaises(ValueError):
            PolynomialCoefficientConstraint(d, [3], [0.1])
        with self.assertRaises(ValueError):
            PolynomialCoefficientConstraint(d, [5], [0.1], embedded=True)
        with self.assertRaises(ValueError):
            PolynomialCoefficientConstraint(MethodDescriptor("emsrk1", 2, 2, k=2), [3], [0.1])

    def test_embedded_polynomial(self):
        d = MethodDescriptor("2S_emb", 3, 2)
        c = PolynomialCoefficientConstraint(d, [3], [0.0], embedded=True)
        coeffs = CoefficientSet(
            A=np.diag([0.5, 0.5], -1), b=np.array([0.2, 0.3, 0.5]), c=np.array([0.0, 0.5, 0.5]),
            Ahat=np.diag([0.5, 0.5], -1), bhat=np.array([0.5, 0.5, 1.0]),
            )
        #bhat A^2 e = 1.0 * 0.25
        np.testing.assert_allclose(c(coeffs), [0.25])

    def test_embedded_stability(self):
        d = MethodDescriptor("2S_emb", 2, 2, objective="acc")
        c = EmbeddedStabilityConstraint(d, [-1.0, -3.0])
        #forward Euler as embedded method, |1 + z|
        coeffs = CoefficientSet(
            A=np.zeros((2, 2)), b=np.array([0.5, 0.5]), c=np.zeros(2),
            Ahat=np.zeros((2, 2)), bhat=np.array([1.0, 0.0]),
            )
        np.testing.assert_allclose(c(coeffs), [1.0, -1.0])

    def test_embedded_stability_needs_embedded_class(self):
        with self.assertRaises(ValueError):
            EmbeddedStabilityConstraint(MethodDescriptor("2S", 2, 2), [-1.0])


class TestEvaluator(unittest.TestCase):
    """Test the assembly and evaluation of the nonlinear constraints."""

    def test_ssp_assembly(self):
        d = MethodDescriptor("erk", 3, 3)
        evaluator = nonlinear_constraints(d)
        self.assertEqual(len(evaluator), 2)
        self.assertEqual(evaluator.n_eq, 3)
        self.assertGreater(evaluator.n_ineq, 0)
        self.assertEqual(len(evaluator.scipy_constraints()), 2)

    def test_acc_has_no_inequalities(self):
        d = MethodDescriptor("erk", 3, 3, objective="acc")
        evaluator = nonlinear_constraints(d)
        self.assertEqual(evaluator.n_ineq, 0)
        self.assertEqual(len(evaluator.scipy_constraints()), 1)

    def test_optional_contributors(self):
        d = MethodDescriptor("3S*_emb", 4, 3, objective="acc")
        evaluator = nonlinear_constraints(
            d,
            poly_coeff_ind=[4], poly_coeff_val=[0.01],
            emb_poly_coeff_ind=[4], emb_poly_coeff_val=[0.0],
            constrain_emb_stability=[-1.0, -2.0 + 1j, -0.5j],
            )
        self.assertEqual(len(evaluator), 4)
        #trees of order 1, 2 and 3 plus the two pinned coefficients
        self.assertEqual(evaluator.n_eq, 1 + 1 + 2 + 2)
        self.assertEqual(evaluator.n_ineq, 3)

        eq, ineq = evaluator.evaluate(np.random.default_rng(0).random(d.n_params))
        self.assertEqual(len(eq), evaluator.n_eq)
        self.assertEqual(len(ineq), evaluator.n_ineq)

    def test_configuration_errors(self):
        with self.assertRaises(ValueError):
            nonlinear_constraints(MethodDescriptor("erk", 3, 2), constrain_emb_stability=[-1.0])
        with self.assertRaises(ValueError):
            nonlinear_constraints(MethodDescriptor("erk", 3, 2), poly_coeff_ind=[3])

    def test_feasible_point(self):
        d = MethodDescriptor("erk", 3, 3)
        evaluator = nonlinear_constraints(d)
        x = encode(SSPRK33, d)
        self.assertLess(evaluator.max_violation(x), 1e-14)
        x[-1] = -1.5
        self.assertGreater(evaluator.max_violation(x), 1e-3)

    def test_cache(self):
        d = MethodDescriptor("erk", 3, 3, objective="acc")
        counter = CountingContributor(d)
        evaluator = NonlinearConstraintEvaluator(d, [counter])
        x = encode(SSPRK33, d)
        evaluator.equalities(x)
        evaluator.inequalities(x)
        evaluator.max_violation(x.copy())
        self.assertEqual(counter.calls, 1)
        evaluator.equalities(x + 0.1)
        self.assertEqual(counter.calls, 2)


if __name__ == '__main__':
    unittest.main(verbosity=2)
