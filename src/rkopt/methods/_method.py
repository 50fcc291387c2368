########################################################################################
##
##                      BASE CLASS FOR METHOD CLASS PARAMETERIZATIONS
##                                (methods/_method.py)
##
########################################################################################

# IMPORTS ==============================================================================

import numpy as np

from .._constants import SSP_ANCHOR_GUESS


# REGISTRY =============================================================================

METHOD_CLASSES = {}


def get_method_class(name):
    """Look up a registered method class by its name.

    Parameters
    ----------
    name : str
        class name, for example 'erk', 'dirk', '2S*' or 'emsrk2'

    Returns
    -------
    method_class : type[MethodClass]
        the parameterization registered under that name
    """
    try:
        return METHOD_CLASSES[name]
    except KeyError:
        raise ValueError(
            f"unknown method class '{name}', "
            f"available: {sorted(METHOD_CLASSES)}"
            ) from None


# BASE CLASS ===========================================================================

class MethodClass:
    """Base class of the per-class parameterizations.

    A method class owns everything that depends on the structure of a
    method family: the layout of the flat parameter vector, the codec
    between that vector and a ``CoefficientSet``, the structurally
    linear constraints, the coordinate bounds and the heuristics for
    initial guesses. Subclasses register themselves under their
    ``name`` and are selected once per optimization.

    The flat vector is a concatenation of named blocks given by
    ``_layout``. When the objective is 'ssp' a single trailing anchor
    entry ``x[-1] = -r`` is appended, with ``r`` the candidate SSP
    coefficient.

    Parameters
    ----------
    s : int
        number of stages
    k : int
        number of steps
    ssp : bool
        append the ssp anchor to the parameter vector

    Attributes
    ----------
    name : str
        registry key of the class
    multistep : bool
        class has a step coupling (``D``, ``theta``)
    has_embedded : bool
        class carries an embedded method
    linear_weight_sum : bool
        ``sum(b) = 1`` is among the linear equalities
    nonnegative : tuple[str]
        blocks that are bounded below by zero for the ssp objective
    """

    name = None
    multistep = False
    has_embedded = False
    linear_weight_sum = False
    nonnegative = ()


    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.name is not None:
            METHOD_CLASSES[cls.name] = cls


    def __init__(self, s, k=1, ssp=False):

        if int(s) != s or s < 1:
            raise ValueError(f"number of stages must be a positive integer, got {s}")
        if int(k) != k or k < 1:
            raise ValueError(f"number of steps must be a positive integer, got {k}")

        self.s = int(s)
        self.k = int(k)
        self.ssp = bool(ssp)

        self._check_counts()

        #slices of the named blocks in the parameter vector
        self.layout = self._layout()
        self._slices, start = {}, 0
        for block, size in self.layout:
            self._slices[block] = slice(start, start + size)
            start += size
        self.n_coeffs = start


    def __repr__(self):
        return f"{type(self).__name__}(s={self.s}, k={self.k}, ssp={self.ssp})"


    def __len__(self):
        return self.n_params


    @property
    def n_params(self):
        """Length of the parameter vector including the ssp anchor."""
        return self.n_coeffs + int(self.ssp)


    def block(self, name):
        """Slice of the named block in the parameter vector."""
        return self._slices[name]


    # structure hooks ------------------------------------------------------------------

    def _check_counts(self):
        if self.k != 1:
            raise ValueError(
                f"method class '{self.name}' is single-step, got {self.k} steps"
                )


    def _layout(self):
        raise NotImplementedError


    def _unpack(self, blocks):
        raise NotImplementedError


    def _pack(self, coeffs):
        raise NotImplementedError


    def pattern(self):
        """Structurally nonzero entries of the coefficient arrays.

        Returns
        -------
        pattern : dict[str, array[bool]]
            boolean masks keyed by coefficient name
        """
        raise NotImplementedError


    # codec ----------------------------------------------------------------------------

    def decode(self, x):
        """Split a flat parameter vector into a ``CoefficientSet``.

        Parameters
        ----------
        x : array[float]
            parameter vector of length ``n_params``

        Returns
        -------
        coeffs : CoefficientSet
            structured coefficients
        """
        x = np.asarray(x, dtype=float)
        if x.ndim != 1 or len(x) != self.n_params:
            raise ValueError(
                f"'{self.name}' with s={self.s}, k={self.k} expects a vector "
                f"of length {self.n_params}, got shape {x.shape}"
                )

        blocks = {block: x[sl] for block, sl in self._slices.items()}
        coeffs = self._unpack(blocks)

        if self.ssp:
            coeffs.r = -x[-1]

        return coeffs


    def encode(self, coeffs):
        """Flatten a ``CoefficientSet`` into a parameter vector.

        Only the free entries of the class are read, structurally fixed
        entries are ignored.

        Parameters
        ----------
        coeffs : CoefficientSet
            structured coefficients

        Returns
        -------
        x : array[float]
            parameter vector of length ``n_params``
        """
        blocks = self._pack(coeffs)

        parts = []
        for block, size in self.layout:
            values = np.asarray(blocks[block], dtype=float).ravel()
            if len(values) != size:
                raise ValueError(
                    f"block '{block}' of '{self.name}' needs {size} entries, "
                    f"got {len(values)}"
                    )
            parts.append(values)

        if self.ssp:
            if coeffs.r is None:
                raise ValueError("ssp parameter vectors need the coefficient 'r'")
            parts.append([-coeffs.r])

        return np.concatenate(parts) if parts else np.zeros(0)


    # linear constraints ---------------------------------------------------------------

    def _row(self):
        return np.zeros(self.n_params)


    def _linear_rows(self):
        return []


    def linear_constraints(self):
        """Structural equalities ``Aeq @ x = beq`` of the class.

        Returns
        -------
        Aeq : array[float]
            equality matrix (m x n_params), possibly with zero rows
        beq : array[float]
            right hand side (m)
        """
        rows = self._linear_rows()
        if not rows:
            return np.zeros((0, self.n_params)), np.zeros(0)
        Aeq = np.array([row for row, _ in rows])
        beq = np.array([rhs for _, rhs in rows], dtype=float)
        return Aeq, beq


    def _weight_sum_row(self, block="b"):
        row = self._row()
        row[self.block(block)] = 1.0
        return row, 1.0


    def bounds(self):
        """Coordinate bounds of the parameter vector.

        For the ssp objective the blocks named in ``nonnegative`` are
        bounded below by zero and the anchor above by zero.

        Returns
        -------
        lb : array[float]
            lower bounds
        ub : array[float]
            upper bounds
        """
        lb = np.full(self.n_params, -np.inf)
        ub = np.full(self.n_params, np.inf)

        if self.ssp:
            for block in self.nonnegative:
                lb[self.block(block)] = 0.0
            ub[-1] = 0.0

        self._restrict_bounds(lb, ub)

        return lb, ub


    def _restrict_bounds(self, lb, ub):
        pass


    # initial guesses ------------------------------------------------------------------

    def _guess_random(self, rng):
        return rng.random(self.n_coeffs)


    def _guess_smart(self, p, rng):
        return None


    def initial_guess(self, mode, rng, p):
        """Generate a starting parameter vector.

        Parameters
        ----------
        mode : str
            'random' or 'smart', classes without a smart heuristic
            fall back to 'random'
        rng : numpy.random.Generator
            random number generator owned by the caller
        p : int
            requested order, used by the smart heuristics

        Returns
        -------
        x : array[float]
            parameter vector of length ``n_params``
        """
        anchor = SSP_ANCHOR_GUESS
        guess = self._guess_smart(p, rng) if mode == "smart" else None

        if guess is None:
            z = self._guess_random(rng)
        else:
            z, smart_anchor = guess
            if smart_anchor is not None:
                anchor = smart_anchor

        if self.ssp:
            z = np.append(z, anchor)

        return np.asarray(z, dtype=float)
