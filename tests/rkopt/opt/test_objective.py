########################################################################################
##
##                                  TESTS FOR
##                               'opt/objective.py'
##
########################################################################################

# IMPORTS ==============================================================================

import unittest

from dataclasses import replace

import numpy as np

from rkopt.methods import CoefficientSet, MethodDescriptor, encode
from rkopt.opt.objective import evaluate_objective, Objective


# TESTS ================================================================================

class TestObjective(unittest.TestCase):
    """Test the 'ssp' and 'acc' objectives."""

    def setUp(self):
        self.rk4 = CoefficientSet(
            A=np.diag([0.5, 0.5, 1.0], -1),
            b=np.array([1/6, 1/3, 1/3, 1/6]),
            c=np.array([0.0, 0.5, 0.5, 1.0]),
            r=0.0,
            )

    def test_ssp_value_and_gradient(self):
        d = MethodDescriptor("erk", 4, 4)
        x = encode(self.rk4, d)
        x[-1] = -1.25
        value, gradient = evaluate_objective(x, d)
        self.assertEqual(value, -1.25)
        np.testing.assert_array_equal(gradient[:-1], 0)
        self.assertEqual(gradient[-1], 1.0)

    def test_acc_value(self):
        d = MethodDescriptor("erk", 4, 4, objective="acc")
        value, gradient = evaluate_objective(encode(self.rk4, d), d)
        self.assertIsNone(gradient)
        self.assertGreater(value, 0.0)

        #RK4 satisfies all fourth order conditions
        d3 = MethodDescriptor("erk", 4, 3, objective="acc")
        value, _ = evaluate_objective(encode(self.rk4, d3), d3)
        self.assertAlmostEqual(value, 0.0, places=14)

    def test_unknown_objective(self):
        d = MethodDescriptor("erk", 2, 2)
        #bypass the validation of the descriptor
        object.__setattr__(d, "objective", "fast")
        with self.assertRaises(ValueError):
            evaluate_objective(np.zeros(d.n_params), d)

    def test_callback(self):
        d = MethodDescriptor("erk", 4, 4)
        objective = Objective(d)
        self.assertTrue(objective.jac)
        value, gradient = objective(encode(self.rk4, d))
        self.assertEqual(value, 0.0)

        d = replace(d, objective="acc")
        objective = Objective(d)
        self.assertEqual(objective.jac, "3-point")
        self.assertIsInstance(objective(encode(self.rk4, d)), float)


if __name__ == '__main__':
    unittest.main(verbosity=2)
