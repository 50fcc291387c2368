########################################################################################
##
##                                  TESTS FOR
##                               'opt/multistart.py'
##
########################################################################################

# IMPORTS ==============================================================================

import pickle
import unittest

from unittest import mock

import numpy as np

from rkopt.methods import CoefficientSet, MethodDescriptor, encode
from rkopt.opt.constraints import nonlinear_constraints
from rkopt.opt.objective import Objective
from rkopt.opt.multistart import LocalRun, LocalProblem, select_best, search


# HELPERS ==============================================================================

SSPRK33 = CoefficientSet(
    A=np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.25, 0.25, 0.0]]),
    b=np.array([1/6, 1/6, 2/3]),
    c=np.array([0.0, 1.0, 0.5]),
    r=0.9,
    )


def make_problem(class_name="erk", s=3, p=3, objective="ssp", algorithm="sqp", **options):
    d = MethodDescriptor(class_name, s, p, objective=objective)
    return LocalProblem(
        d,
        Objective(d),
        nonlinear_constraints(d),
        algorithm=algorithm,
        solver_options=options or {"maxiter": 300, "ftol": 1e-12},
        )


def run(index, fun, exit_flag, violation=0.0):
    x = None if exit_flag == -2 else np.full(2, float(index))
    return LocalRun(index, x, fun, exit_flag, "", max_violation=violation)


# TESTS ================================================================================

class TestSelection(unittest.TestCase):
    """Test the selection of the best local run."""

    def test_best_converged(self):
        runs = [run(0, -1.0, 1), run(1, -2.0, 2), run(2, -5.0, -1), run(3, -1.5, 0)]
        result = select_best(runs)
        self.assertEqual(result.status, 1)
        self.assertEqual(result.fun, -2.0)
        np.testing.assert_array_equal(result.x, [1.0, 1.0])
        self.assertEqual(result.n_converged, 2)
        self.assertEqual(len(result.runs), 4)

    def test_ties_keep_first(self):
        runs = [run(0, -1.0, 1), run(1, -2.0, 1), run(2, -2.0 + 1e-12, 1)]
        result = select_best(runs)
        self.assertEqual(result.ties, 2)
        np.testing.assert_array_equal(result.x, [1.0, 1.0])

    def test_nothing_converged(self):
        runs = [run(0, -1.0, -1, 0.3), run(1, -3.0, 0, 0.1), run(2, np.inf, -2)]
        result = select_best(runs)
        self.assertEqual(result.status, 0)
        self.assertEqual(result.fun, -3.0)

    def test_no_points(self):
        result = select_best([run(0, np.inf, -2), run(1, np.inf, -2)])
        self.assertEqual(result.status, -1)
        self.assertIsNone(result.x)

    def test_empty(self):
        self.assertEqual(select_best([]).status, -1)


class TestLocalProblem(unittest.TestCase):
    """Test the local constrained problem."""

    def test_unknown_algorithm(self):
        with self.assertRaises(ValueError):
            make_problem(algorithm="active-set")

    def test_options(self):
        problem = make_problem(maxiter=7)
        self.assertEqual(problem.options()["maxiter"], 7)
        self.assertIn("ftol", problem.options())

        problem = make_problem(algorithm="interior-point", maxiter=7)
        options = problem.options()
        self.assertEqual(options["maxiter"], 7)
        self.assertIn("barrier_tol", options)

    def test_violation_of_known_method(self):
        problem = make_problem()
        d = problem.descriptor
        self.assertLess(problem.max_violation(encode(SSPRK33, d)), 1e-12)

    def test_solve_from_ssprk33(self):
        #starting near the optimum the radius grows to one
        problem = make_problem()
        x0 = encode(SSPRK33, problem.descriptor)
        result = problem.solve(x0, index=4)
        self.assertEqual(result.index, 4)
        self.assertGreater(result.exit_flag, 0)
        self.assertAlmostEqual(result.fun, -1.0, places=6)
        self.assertLess(result.max_violation, 1e-10)

    def test_numerical_exception(self):
        problem = make_problem()
        x0 = encode(SSPRK33, problem.descriptor)
        with mock.patch("scipy.optimize.minimize", side_effect=np.linalg.LinAlgError("singular")):
            result = problem.solve(x0)
        self.assertEqual(result.exit_flag, -2)
        self.assertIsNone(result.x)
        self.assertIn("singular", result.message)

    def test_picklable(self):
        problem = pickle.loads(pickle.dumps(make_problem(objective="acc")))
        self.assertEqual(problem.algorithm, "SLSQP")


class TestSearch(unittest.TestCase):
    """Test the serial multi-start search."""

    def test_serial(self):
        problem = make_problem()
        x0 = encode(SSPRK33, problem.descriptor)
        x1 = x0.copy()
        x1[-1] = -0.5
        result = search(problem, [x0, x1], worker_count=1, suppress_warnings=True)
        self.assertEqual(result.status, 1)
        self.assertEqual([r.index for r in result.runs], [0, 1])
        self.assertAlmostEqual(result.fun, -1.0, places=6)


if __name__ == '__main__':
    unittest.main(verbosity=2)
