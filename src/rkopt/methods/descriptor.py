########################################################################################
##
##                      METHOD DESCRIPTOR AND COEFFICIENT CODEC
##                              (methods/descriptor.py)
##
########################################################################################

# IMPORTS ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field

from ._method import MethodClass, get_method_class

#importing the families registers their classes
from . import rungekutta, lowstorage, multistep


# CONSTANTS ============================================================================

OBJECTIVES = ("ssp", "acc")


# CLASS ================================================================================

@dataclass(frozen=True)
class MethodDescriptor:
    """Immutable description of the method that is searched for.

    The method class is resolved once at construction, every other
    component works with the resolved ``method`` and never compares
    class names again.

    Parameters
    ----------
    class_name : str
        registered method class, for example 'erk' or 'dimsrk2'
    s : int
        number of stages
    p : int
        requested order of accuracy
    k : int
        number of steps, 1 for single-step classes
    objective : str
        'ssp' maximizes the SSP coefficient, 'acc' minimizes the
        leading truncation error

    Attributes
    ----------
    method : MethodClass
        parameterization of the class for ``s``, ``k`` and ``objective``
    """

    class_name: str
    s: int
    p: int
    k: int = 1
    objective: str = "ssp"
    method: MethodClass = field(init=False, repr=False, compare=False)


    def __post_init__(self):

        if self.objective not in OBJECTIVES:
            raise ValueError(
                f"unrecognized objective '{self.objective}', expected one of {OBJECTIVES}"
                )
        if int(self.p) != self.p or self.p < 1:
            raise ValueError(f"order must be a positive integer, got {self.p}")

        method = get_method_class(self.class_name)(
            self.s, self.k, ssp=self.objective == "ssp"
            )

        if method.multistep and self.objective != "ssp":
            raise ValueError(
                f"multistep class '{self.class_name}' only supports the 'ssp' objective"
                )

        object.__setattr__(self, "method", method)


    @property
    def n_params(self):
        return self.method.n_params


    @property
    def is_ssp(self):
        return self.objective == "ssp"


# CODEC ================================================================================

def decode(x, descriptor):
    """Decode a flat parameter vector into a ``CoefficientSet``.

    Parameters
    ----------
    x : array[float]
        parameter vector
    descriptor : MethodDescriptor
        description of the method

    Returns
    -------
    coeffs : CoefficientSet
        structured coefficients
    """
    return descriptor.method.decode(x)


def encode(coeffs, descriptor):
    """Encode a ``CoefficientSet`` into a flat parameter vector.

    Parameters
    ----------
    coeffs : CoefficientSet
        structured coefficients
    descriptor : MethodDescriptor
        description of the method

    Returns
    -------
    x : array[float]
        parameter vector
    """
    return descriptor.method.encode(coeffs)
