########################################################################################
##
##                                  TESTS FOR
##                                'theory/ssp.py'
##
########################################################################################

# IMPORTS ==============================================================================

import unittest

import numpy as np

from rkopt.methods import CoefficientSet, MethodDescriptor, decode
from rkopt.theory.ssp import (
    butcher_matrix,
    general_form,
    absolute_monotonicity,
    is_absolutely_monotonic,
    am_radius,
    monotonicity_pattern,
    optimal_shuosher_form,
    )


# HELPERS ==============================================================================

def butcher(A, b):
    A, b = np.array(A, dtype=float), np.array(b, dtype=float)
    return CoefficientSet(A=A, b=b, c=A.sum(axis=1))


EULER = butcher([[0]], [1])
SSPRK22 = butcher([[0, 0], [1, 0]], [0.5, 0.5])
SSPRK33 = butcher([[0, 0, 0], [1, 0, 0], [0.25, 0.25, 0]], [1/6, 1/6, 2/3])
SSPRK34 = butcher(
    [[0, 0, 0, 0], [0.5, 0, 0, 0], [0.5, 0.5, 0, 0], [1/6, 1/6, 1/6, 0]],
    [1/6, 1/6, 1/6, 0.5],
    )
RK4 = butcher(
    [[0, 0, 0, 0], [0.5, 0, 0, 0], [0, 0.5, 0, 0], [0, 0, 1, 0]],
    [1/6, 1/3, 1/3, 1/6],
    )
DIRK2 = butcher([[0.25, 0], [0.5, 0.25]], [0.5, 0.5])

AB2 = CoefficientSet(
    A=np.zeros((1, 1)), b=np.array([1.5]), c=np.zeros(1),
    Ahat=np.zeros((1, 1)), bhat=np.array([-0.5]),
    D=np.array([[0.0, 1.0]]), theta=np.array([0.0, 1.0]),
    )


def as_two_step(rk):
    s = rk.s
    return CoefficientSet(
        A=rk.A, b=rk.b, c=rk.c,
        Ahat=np.zeros((s, s)), bhat=np.zeros(s),
        D=np.tile([0.0, 1.0], (s, 1)), theta=np.array([0.0, 1.0]),
        )


# TESTS ================================================================================

class TestMatrixForms(unittest.TestCase):
    """Test the matrix forms of methods."""

    def test_butcher_matrix(self):
        K = butcher_matrix(SSPRK22)
        np.testing.assert_array_equal(K, [[0, 0, 0], [1, 0, 0], [0.5, 0.5, 0]])

    def test_general_form(self):
        S, That, T = general_form(AB2)
        np.testing.assert_array_equal(S, [[0, 1, 0], [0, 1, 0]])
        np.testing.assert_array_equal(That, [[0, 0, 0], [0, 0, -0.5]])
        np.testing.assert_array_equal(T, [[0, 0], [1.5, 0]])


class TestRadius(unittest.TestCase):
    """Test the radius of absolute monotonicity of known methods."""

    def test_known_radii(self):
        cases = [
            (EULER, 1.0),
            (SSPRK22, 1.0),
            (SSPRK33, 1.0),
            (SSPRK34, 2.0),
            (DIRK2, 4.0),
            (RK4, 0.0),
            ]
        for coeffs, expected in cases:
            with self.subTest(expected=expected, s=coeffs.s):
                self.assertAlmostEqual(am_radius(coeffs), expected, places=8)

    def test_zero_radius_is_exact(self):
        #negative entries of order r**2 are not hidden by the tolerance
        self.assertEqual(am_radius(RK4), 0.0)
        self.assertFalse(is_absolutely_monotonic(RK4, 1e-8))
        self.assertTrue(is_absolutely_monotonic(RK4, 0.0))

    def test_monotonic_below_radius(self):
        self.assertTrue(is_absolutely_monotonic(SSPRK34, 1.9))
        self.assertFalse(is_absolutely_monotonic(SSPRK34, 2.1))

    def test_blocks_at_zero(self):
        v, M = absolute_monotonicity(SSPRK33, 0.0)
        np.testing.assert_array_equal(v, 1)
        np.testing.assert_array_equal(M, 0)

    def test_upper_limit(self):
        #the zero method is monotonic for every radius
        zero = butcher([[0, 0], [0, 0]], [0, 0])
        self.assertEqual(am_radius(zero, rmax=50.0), 50.0)

    def test_multistep_runge_kutta(self):
        for rk in (SSPRK22, SSPRK33, SSPRK34):
            with self.subTest(s=rk.s):
                self.assertAlmostEqual(am_radius(as_two_step(rk)), am_radius(rk), places=8)

    def test_negative_coefficient_multistep(self):
        self.assertAlmostEqual(am_radius(AB2), 0.0, places=10)


class TestPattern(unittest.TestCase):
    """Test the structural masks of the monotonicity blocks."""

    def test_shapes(self):
        d = MethodDescriptor("erk", 3, 2)
        masks = monotonicity_pattern(d.method.pattern(), False)
        self.assertEqual(masks[0].shape, (4,))
        self.assertEqual(masks[1].shape, (4, 4))
        #explicit methods never reach backwards
        np.testing.assert_array_equal(np.triu(masks[1]), False)

    def test_multistep_shapes(self):
        d = MethodDescriptor("emsrk1", 3, 2, k=2)
        masks = monotonicity_pattern(d.method.pattern(), True)
        self.assertEqual([m.shape for m in masks], [(4, 5), (4, 5), (4, 4)])

    def test_masks_cover_nonzeros(self):
        rng = np.random.default_rng(7)
        for name, k in (("erk", 1), ("dirk", 1), ("2S", 1), ("emsrk2", 2), ("dimsrk1", 3)):
            with self.subTest(name=name):
                d = MethodDescriptor(name, 3, 2, k)
                method = d.method
                masks = monotonicity_pattern(method.pattern(), method.multistep)
                coeffs = decode(rng.random(d.n_params), d)
                for block, mask in zip(absolute_monotonicity(coeffs, 0.3), masks):
                    np.testing.assert_allclose(block[~mask], 0, atol=1e-12)


class TestShuOsher(unittest.TestCase):
    """Test the optimal Shu-Osher form."""

    def test_rows_sum_to_one(self):
        for rk in (SSPRK22, SSPRK33, SSPRK34, DIRK2):
            with self.subTest(s=rk.s):
                v, alpha, beta = optimal_shuosher_form(rk)
                np.testing.assert_allclose(v + alpha.sum(axis=1), 1, atol=1e-12)
                self.assertTrue(np.all(alpha >= -1e-12))
                self.assertTrue(np.all(v >= -1e-12))

    def test_ssprk22(self):
        v, alpha, beta = optimal_shuosher_form(SSPRK22, r=1.0)
        np.testing.assert_allclose(v, [1, 0, 0.5], atol=1e-15)
        np.testing.assert_allclose(alpha[2], [0, 0.5, 0], atol=1e-15)
        np.testing.assert_allclose(beta, alpha)

    def test_multistep_rejected(self):
        with self.assertRaises(ValueError):
            optimal_shuosher_form(AB2)


if __name__ == '__main__':
    unittest.main(verbosity=2)
