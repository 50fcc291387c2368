########################################################################################
##
##                      EVALUATION OF COMPLETE COEFFICIENT SEARCHES
##
##         Searches for methods with known optimal SSP coefficients and checks
##          that the process pool reproduces the serial search exactly.
##
########################################################################################

# IMPORTS ==============================================================================

import unittest

import numpy as np

from rkopt import optimize
from rkopt.theory import am_radius, check_order


# HELPERS ==============================================================================

SEARCH = dict(
    starting_point_count=8,
    start_mode="smart",
    solve_order_conditions_first=True,
    seed=2024,
    display_verbosity="off",
    suppress_warnings=True,
    )


# TESTS ================================================================================

class TestKnownOptima(unittest.TestCase):
    """Explicit SSP methods with known optimal coefficients."""

    def _check(self, s, p, expected):
        method = optimize(s, p, "erk", "ssp", **SEARCH)
        self.assertTrue(method, getattr(method, "reason", ""))
        self.assertEqual(method.attained_order, p)
        self.assertAlmostEqual(method.r, expected, places=5)

        #the anchor agrees with the radius of the decoded coefficients
        self.assertAlmostEqual(am_radius(method.coefficients), method.r, places=5)
        self.assertEqual(check_order(method.coefficients), p)

    def test_ssprk22(self):
        self._check(2, 2, 1.0)

    def test_ssprk32(self):
        self._check(3, 2, 2.0)

    def test_ssprk33(self):
        self._check(3, 3, 1.0)

    def test_ssprk43(self):
        self._check(4, 3, 2.0)


class TestParallel(unittest.TestCase):
    """The worker count does not change the result."""

    def test_serial_equals_pool(self):
        kwargs = dict(SEARCH, starting_point_count=4, start_mode="random")
        serial = optimize(3, 2, "erk", "ssp", worker_count=1, **kwargs)
        pooled = optimize(3, 2, "erk", "ssp", worker_count=2, **kwargs)

        self.assertTrue(serial)
        self.assertTrue(pooled)
        np.testing.assert_array_equal(serial.x, pooled.x)
        self.assertEqual(serial.r, pooled.r)


class TestAccuracy(unittest.TestCase):
    """Searches with the truncation error objective."""

    def test_low_storage(self):
        method = optimize(
            4, 3, "2S", "acc",
            starting_point_count=6,
            solve_order_conditions_first=True,
            seed=7,
            display_verbosity="off",
            suppress_warnings=True,
            )
        self.assertTrue(method, getattr(method, "reason", ""))
        self.assertGreaterEqual(method.attained_order, 3)
        self.assertGreaterEqual(method.r, 0.0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
