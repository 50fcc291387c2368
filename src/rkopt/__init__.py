#for direct access to the main classes and functions
from .methods import CoefficientSet, MethodDescriptor, decode, encode, get_method_class
from .opt import (
    optimize,
    OptimizerOptions,
    EnrichedMethod,
    Failure,
    FailureKind,
    finalize,
    )

__version__ = "0.1.0"
