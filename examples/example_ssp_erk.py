#########################################################################################
##
##        rkopt example: optimal explicit SSP method with four stages, order three
##
#########################################################################################

# IMPORTS ===============================================================================

import numpy as np
import matplotlib.pyplot as plt

from rkopt import optimize, OptimizerOptions
from rkopt.theory import stability_function


# SEARCH SETUP ==========================================================================

options = OptimizerOptions(
    starting_point_count=8,
    worker_count=2,
    start_mode="smart",
    solve_order_conditions_first=True,
    display_verbosity="final",
    seed=1,
)


# Run Example ===========================================================================

if __name__ == '__main__':

    # the optimum is the SSPRK(4,3) method with SSP coefficient 2
    method = optimize(4, 3, "erk", "ssp", options)

    if not method:
        raise SystemExit(method.reason)

    print("SSP coefficient:", method.r)
    print("A =\n", method.coefficients.A)
    print("b =", method.coefficients.b)

    # stability region on a grid of the complex plane
    x, y = np.meshgrid(np.linspace(-5, 1, 241), np.linspace(-3.5, 3.5, 281))
    R = stability_function(method.coefficients.A, method.coefficients.b, x + 1j*y)

    # SSP circle |z + r| <= r
    phi = np.linspace(0, 2*np.pi, 200)

    plt.figure(figsize=(6, 6))
    plt.contourf(x, y, np.abs(R), levels=[0, 1], colors=["tab:blue"], alpha=0.3)
    plt.contour(x, y, np.abs(R), levels=[1], colors=["tab:blue"])
    plt.plot(method.r*(np.cos(phi) - 1), method.r*np.sin(phi), '--', c="tab:red", label='SSP disk')
    plt.axhline(0, c="k", lw=0.5)
    plt.axvline(0, c="k", lw=0.5)
    plt.gca().set_aspect("equal")
    plt.xlabel('Re(z)')
    plt.ylabel('Im(z)')
    plt.title('Stability region of the optimal SSP(4,3) method')
    plt.legend()
    plt.show()
