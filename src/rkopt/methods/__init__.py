from ._coefficients import CoefficientSet
from ._method import MethodClass, METHOD_CLASSES, get_method_class
from .descriptor import MethodDescriptor, OBJECTIVES, decode, encode

from .rungekutta import (
    ExplicitRungeKutta,
    ImplicitRungeKutta,
    ImplicitRungeKuttaZeroRow,
    DiagonallyImplicitRungeKutta,
    DiagonallyImplicitRungeKuttaZeroRow,
    SinglyDiagonallyImplicitRungeKutta,
    )
from .lowstorage import (
    TwoRegister,
    TwoS,
    TwoSStar,
    ThreeSStar,
    TwoSEmbedded,
    ThreeSStarEmbedded,
    )
from .multistep import (
    ExplicitMultistepType1,
    ExplicitMultistepType2,
    ImplicitMultistepType1,
    ImplicitMultistepType2,
    DiagonallyImplicitMultistepType1,
    DiagonallyImplicitMultistepType2,
    )
