#########################################################################################
##
##    rkopt example: accurate 2S low-storage methods with an embedded error estimate
##
#########################################################################################

# IMPORTS ===============================================================================

import numpy as np
import matplotlib.pyplot as plt

from rkopt import optimize
from rkopt.theory import stability_function


# STABILITY CONSTRAINTS =================================================================

# embedded method stable along the negative real axis
emb_points = -np.linspace(0.1, 2.0, 8)


# Run Example ===========================================================================

if __name__ == '__main__':

    method = optimize(
        5, 4, "2S_emb", "acc",
        starting_point_count=10,
        worker_count=4,
        solve_order_conditions_first=True,
        constrain_emb_stability=emb_points,
        display_verbosity="final",
        write_to_file=True,
        output_dir="methods",
        seed=3,
    )

    if not method:
        raise SystemExit(method.reason)

    coeffs = method.coefficients
    print("error coefficient:", method.errcoeff)
    print("beta  =", coeffs.beta)
    print("gamma =", coeffs.gamma1, coeffs.gamma2)
    print("delta =", coeffs.delta)

    # stability functions of the main and the embedded method on the real axis
    z = np.linspace(-5, 0.5, 400)
    R = stability_function(coeffs.A, coeffs.b, z)
    R_emb = stability_function(coeffs.Ahat, coeffs.bhat, z)

    plt.figure(figsize=(8, 5))
    plt.plot(z, np.abs(R), lw=2, label='main method')
    plt.plot(z, np.abs(R_emb), '--', lw=2, label='embedded method')
    plt.plot(emb_points, np.ones_like(emb_points), 'o', c="k", label='constrained points')
    plt.axhline(1, c="k", lw=0.5)
    plt.ylim(0, 2)
    plt.xlabel('z')
    plt.ylabel('|R(z)|')
    plt.title('Low-storage method with embedded pair')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.show()
