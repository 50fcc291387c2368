########################################################################################
##
##                         GLOBAL CONSTANTS AND DEFAULT VALUES
##                                  (_constants.py)
##
########################################################################################

# LOCAL SOLVER =========================================================================

OPT_MAX_ITER = 10000            # max number of iterations per local run
OPT_TOL_CON = 1e-14             # constraint tolerance of the local solver
OPT_TOL_FUN = 1e-13             # objective tolerance of the local solver
OPT_TOL_X = 1e-15               # step tolerance of the local solver

OPT_ALGORITHMS = {
    "sqp": "SLSQP",
    "slsqp": "SLSQP",
    "interior-point": "trust-constr",
    "trust-constr": "trust-constr",
    }

#local solver used when none is requested, per objective
DEFAULT_ALGORITHMS = {
    "ssp": "sqp",
    "acc": "interior-point",
    }


# SEARCH ===============================================================================

DEFAULT_STARTING_POINTS = 10    # number of local runs of the multi-start search
FEASIBILITY_TOLERANCE = 1e-10   # max constraint violation of an accepted local optimum
TIE_TOLERANCE = 1e-10           # objective values closer than this count as ties
SSP_ANCHOR_GUESS = -0.01        # initial value of the ssp anchor for random starts


# PROJECTION ===========================================================================

PROJECTION_TOLERANCE = 1e-14    # ftol, xtol and gtol of the projection solve
PROJECTION_MAX_NFEV = 2000      # max number of residual evaluations of the projection


# ORDER CONDITIONS =====================================================================

ORDER_CHECK_TOLERANCE = 1e-10   # max residual for an order condition to count as met
ORDER_CHECK_MAX = 12            # highest order that is ever checked


# ABSOLUTE MONOTONICITY ================================================================

AM_RADIUS_MAX = 1000.0          # upper end of the radius bisection interval
AM_RADIUS_TOL = 1e-12           # width of the final radius bisection interval
AM_TOLERANCE = 1e-14            # entries above -AM_TOLERANCE*r count as nonnegative


# METHOD CLASSES =======================================================================

SDIRK_DIAGONAL_BOUNDS = (0.0, 1.0)  # admissible range of the sdirk diagonal
IRK5_ANCHOR_GUESS = -0.1            # anchor of the irk5 smart guess
SSPDIRK5_ZERO_WEIGHTS = 4           # trailing weights zeroed by the sspdirk5 smart guess
