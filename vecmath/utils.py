# utils.py

import numpy as np
from numpy import ndarray
from typing import Tuple

from vecmath.kernels import polar_decompose
from vecmath.precision import precision_of


def compose_matrix(rotation: ndarray, translation: ndarray, scale: float) -> ndarray:
    """Build a 4x4 [R*s t; 0 0 0 1]. Scale first, then rotate, then translate."""
    rotation = np.asarray(rotation)
    m = np.zeros((4, 4), dtype=rotation.dtype)
    m[:3, :3] = rotation * scale
    m[:3, 3] = translation
    m[3, 3] = 1.0
    return m


def decompose_matrix(mat: ndarray) -> Tuple[ndarray, ndarray, float]:
    """Decompose a 4x4 transformation matrix into translation, rotation, and scale.
    Ignore shear and non-uniform scale.

    Args:
        mat (ndarray): 4x4 transformation matrix

    Returns:
        tuple[ndarray, ndarray, float]: translation, rotation, scale

    Raises:
        SingularMatrixError: if the upper-left 3x3 is singular.
    """
    mat = np.asarray(mat)
    t = mat[:3, 3].copy()
    R, sigma, _ = polar_decompose(mat, precision_of(mat.dtype).singular_threshold)
    # uniform scale = max singular value
    scale = float(np.max(np.abs(sigma)))
    return t, R, scale


def hash_components(data: ndarray) -> int:
    """
    Fold the IEEE-754 bit patterns of every component into one int.

    Bitwise-equal arrays hash equally; +0.0 and -0.0 hash differently.
    """
    if data.dtype == np.float64:
        bits = data.view(np.uint64)
    else:
        bits = data.view(np.uint32)
    h = 0
    for b in bits.ravel().tolist():
        h ^= b ^ (b >> 32)
    return h & 0xFFFFFFFF


def format_components(data: ndarray) -> str:
    """Parenthesized, comma-separated components, e.g. '(1.0, 2.0, 3.0)'."""
    return "(" + ", ".join(str(v) for v in data) + ")"
