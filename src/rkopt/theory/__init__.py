from .trees import (
    trees,
    trees_of_order,
    tall_tree,
    order,
    density,
    symmetry,
    height,
    elementary_weight,
    )
from .orderconditions import (
    tree_residuals,
    order_conditions,
    check_order,
    truncation_error,
    errcoeff,
    )
from .ssp import (
    absolute_monotonicity,
    is_absolutely_monotonic,
    monotonicity_pattern,
    am_radius,
    optimal_shuosher_form,
    )
from .stability import stability_function, polynomial_coefficients
