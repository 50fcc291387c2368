########################################################################################
##
##                   ROOTED TREES AND ELEMENTARY WEIGHTS OF RK METHODS
##                                 (theory/trees.py)
##
########################################################################################

"""
Rooted trees are represented as nested tuples, a tree is the sorted tuple
of its subtrees and the single node is the empty tuple ``()``. Sorting
makes the representation canonical, so trees can be compared, hashed and
cached directly.
"""

# IMPORTS ==============================================================================

import math

from collections import Counter
from functools import lru_cache

import numpy as np


# TREE PROPERTIES ======================================================================

def canonical(children):
    """Canonical tree with the given subtrees."""
    return tuple(sorted(children))


@lru_cache(maxsize=None)
def order(tree):
    """Number of nodes of the tree."""
    return 1 + sum(order(child) for child in tree)


@lru_cache(maxsize=None)
def density(tree):
    """Density ``gamma(t) = |t| prod gamma(t_i)`` of the tree."""
    return order(tree) * math.prod(density(child) for child in tree)


@lru_cache(maxsize=None)
def symmetry(tree):
    """Symmetry ``sigma(t) = prod sigma(t_i)^m_i m_i!`` of the tree."""
    result = 1
    for child, m in Counter(tree).items():
        result *= symmetry(child)**m * math.factorial(m)
    return result


@lru_cache(maxsize=None)
def height(tree):
    """Number of nodes on the longest path from the root to a leaf."""
    return 1 + max((height(child) for child in tree), default=0)


def tall_tree(n):
    """The tree of order ``n`` whose nodes form a single chain."""
    tree = ()
    for _ in range(n - 1):
        tree = (tree,)
    return tree


# ENUMERATION ==========================================================================

def _grow(tree):
    #all trees obtained by attaching one leaf to some node of the tree
    yield canonical(tree + ((),))
    for i, child in enumerate(tree):
        if child in tree[:i]:
            continue
        rest = tree[:i] + tree[i+1:]
        for grown in _grow(child):
            yield canonical(rest + (grown,))


@lru_cache(maxsize=None)
def trees(n):
    """All rooted trees with ``n`` nodes.

    Parameters
    ----------
    n : int
        order of the trees

    Returns
    -------
    trees : tuple[tuple]
        canonical trees in a fixed order
    """
    if n < 1:
        return ()
    if n == 1:
        return ((),)
    return tuple(sorted({g for t in trees(n - 1) for g in _grow(t)}))


def trees_of_order(n, problem_class="nonlinear"):
    """Trees whose conditions apply to ``problem_class``.

    Parameters
    ----------
    n : int
        order of the trees
    problem_class : str
        'nonlinear' uses all trees, 'linear' only the tall tree

    Returns
    -------
    trees : tuple[tuple]
        trees of order ``n``
    """
    if problem_class == "linear":
        return (tall_tree(n),)
    if problem_class == "nonlinear":
        return trees(n)
    raise ValueError(f"unknown problem class '{problem_class}'")


# ELEMENTARY WEIGHTS ===================================================================

def stage_weights(tree, A, cache=None):
    """Stage vector of a tree, the product of ``A`` applied to its subtrees.

    Parameters
    ----------
    tree : tuple
        rooted tree
    A : array[float]
        stage coupling matrix
    cache : dict, None
        memo of already computed subtrees

    Returns
    -------
    phi : array[float]
        vector of length ``s``, ones for the single node
    """
    if cache is None:
        cache = {}
    if tree not in cache:
        phi = np.ones(A.shape[0])
        for child in tree:
            phi = phi * (A @ stage_weights(child, A, cache))
        cache[tree] = phi
    return cache[tree]


def elementary_weight(tree, A, b, cache=None):
    """Elementary weight ``Phi(t) = b . phi(t)`` of a Runge-Kutta method.

    Parameters
    ----------
    tree : tuple
        rooted tree
    A : array[float]
        stage coupling matrix
    b : array[float]
        stage weights
    cache : dict, None
        memo of already computed subtrees

    Returns
    -------
    weight : float
    """
    return float(np.dot(b, stage_weights(tree, np.asarray(A, dtype=float), cache)))
