########################################################################################
##
##                       TEXT REPORTS OF OPTIMIZED METHODS
##                               (utils/report.py)
##
########################################################################################

# IMPORTS ==============================================================================

import os

from datetime import datetime

import numpy as np


# CONSTANTS ============================================================================

SEPARATOR = "=" * 62
NUMBER_FORMAT = "%.16e"


# FUNCTIONS ============================================================================

def report_filename(class_name, p, s, append_time=True, now=None):
    """File name ``<class>-<p>-<s>[_<timestamp>].txt`` of a method report."""
    name = f"{class_name}-{p}-{s}"
    if append_time:
        now = now or datetime.now()
        name += "_" + now.strftime("%Y-%m-%dT%H-%M-%S")
    return name + ".txt"


def _write_field(f, name, value):
    f.write(f"{name} =\n")
    np.savetxt(f, np.atleast_2d(np.asarray(value, dtype=float)), fmt=NUMBER_FORMAT, delimiter="\t")
    f.write("\n")


def write_method(method, output_dir=".", append_time=True):
    """Write the coefficients and properties of a method to a text file.

    Parameters
    ----------
    method : EnrichedMethod
        accepted method
    output_dir : str
        target directory, created if missing
    append_time : bool
        append a timestamp to the file name

    Returns
    -------
    path : str
        path of the written file
    """
    descriptor = method.descriptor
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(
        output_dir,
        report_filename(descriptor.class_name, descriptor.p, descriptor.s, append_time)
        )

    with open(path, "w") as f:
        f.write("#stage\t\torder\n")
        f.write(f"{descriptor.s}\t\t{descriptor.p}\n\n")

        if descriptor.k > 1:
            f.write(f"#steps\n{descriptor.k}\n\n")

        for name, value in method.coefficients.items():
            if name != "r":
                _write_field(f, name, value)

        _write_field(f, "r", method.r)
        if method.errcoeff is not None:
            _write_field(f, "errcoeff", method.errcoeff)

        if method.shu_osher is not None:
            _write_field(f, "v_opt", method.shu_osher.v)
            _write_field(f, "alpha_opt", method.shu_osher.alpha)
            _write_field(f, "beta_opt", method.shu_osher.beta)

        f.write(f"\n{SEPARATOR}\n\n")

    return path
