########################################################################################
##
##                  VALIDATION AND PROPERTIES OF THE WINNING METHOD
##                                 (opt/finalize.py)
##
########################################################################################

# IMPORTS ==============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..methods.descriptor import MethodDescriptor, decode
from ..methods._coefficients import CoefficientSet
from ..theory.orderconditions import check_order, errcoeff
from ..theory.ssp import am_radius, optimal_shuosher_form

__all__ = [
    "FailureKind",
    "Failure",
    "ShuOsherForm",
    "EnrichedMethod",
    "finalize",
]


# RESULTS ==============================================================================

class FailureKind(Enum):
    """Reason why a search did not produce an acceptable method."""
    NO_CONVERGENCE = "no local run converged"
    ORDER_NOT_ATTAINED = "order not attained"
    RADIUS_BELOW_THRESHOLD = "SSP coefficient below threshold"


@dataclass(frozen=True)
class Failure:
    """Unsuccessful search, falsy so it can be tested like a missing result.

    Parameters
    ----------
    kind : FailureKind
        category of the failure
    reason : str
        human readable explanation
    status : int
        status of the multi-start search
    attained_order : int, None
        numerically attained order, if a converged point was checked
    r : float, None
        SSP coefficient of the converged point, if known
    """
    kind: FailureKind
    reason: str
    status: int
    attained_order: int | None = None
    r: float | None = None


    def __bool__(self):
        return False


@dataclass(frozen=True, eq=False)
class ShuOsherForm:
    """Shu-Osher form ``(v, alpha, beta)`` at the SSP coefficient."""
    v: np.ndarray
    alpha: np.ndarray
    beta: np.ndarray


@dataclass(frozen=True, eq=False)
class EnrichedMethod:
    """Accepted method with its derived properties.

    Parameters
    ----------
    descriptor : MethodDescriptor
        description of the method that was searched for
    coefficients : CoefficientSet
        decoded coefficients
    x : array[float]
        winning parameter vector
    attained_order : int
        numerically attained order, at least the requested one
    r : float
        SSP coefficient, from the anchor for 'ssp' and computed for 'acc'
    errcoeff : float, None
        norm of the leading truncation error of single-step methods
    shu_osher : ShuOsherForm, None
        optimal Shu-Osher form of single-step methods found with 'ssp'
    eligible : bool
        attained order equals the requested one, only eligible
        methods are written to disk
    status : int
        status of the multi-start search
    """
    descriptor: MethodDescriptor
    coefficients: CoefficientSet
    x: np.ndarray
    attained_order: int
    r: float
    errcoeff: float | None
    shu_osher: ShuOsherForm | None
    eligible: bool
    status: int = 1


# FUNCTION =============================================================================

def finalize(x, descriptor, status=1, min_ssp_radius=0.0, problem_class="nonlinear"):
    """Validate the winning vector and compute the method properties.

    Parameters
    ----------
    x : array[float], None
        best vector of the search
    descriptor : MethodDescriptor
        description of the method
    status : int
        status of the search, values <= 0 mean no run converged
    min_ssp_radius : float
        SSP coefficients not above this value are rejected ('ssp' only)
    problem_class : str
        'nonlinear' or 'linear', selects the order conditions that are checked

    Returns
    -------
    result : EnrichedMethod, Failure
    """
    if status <= 0 or x is None:
        return Failure(
            FailureKind.NO_CONVERGENCE,
            f"failed to find a solution, no local run converged (status {status})",
            status,
            )

    x = np.array(x, dtype=float)
    coeffs = decode(x, descriptor)
    p = descriptor.p

    order = check_order(coeffs, problem_class)
    r = float(coeffs.r) if descriptor.is_ssp else am_radius(coeffs)

    if order < p:
        return Failure(
            FailureKind.ORDER_NOT_ATTAINED,
            f"the method found has order {order}, wanted {p}",
            status, order, r,
            )

    if descriptor.is_ssp and not r > min_ssp_radius:
        return Failure(
            FailureKind.RADIUS_BELOW_THRESHOLD,
            f"SSP coefficient {r:.12g} does not exceed the minimum {min_ssp_radius:.12g}",
            status, order, r,
            )

    error, shu_osher = None, None
    if not coeffs.is_multistep:
        error = errcoeff(coeffs, order, problem_class)
        if descriptor.is_ssp:
            shu_osher = ShuOsherForm(*optimal_shuosher_form(coeffs))

    return EnrichedMethod(
        descriptor=descriptor,
        coefficients=coeffs,
        x=x,
        attained_order=order,
        r=r,
        errcoeff=error,
        shu_osher=shu_osher,
        eligible=order == p,
        status=status,
        )
