# blockqsim/amplitude.py
"""Scalar complex helpers shared by the register and the gate catalog.

Amplitudes are plain Python ``complex`` values (or numpy complex scalars
pulled out of a buffer); these helpers only add the tolerance rules the
simulator relies on and the ``[re, im]`` JSON form.
"""
from typing import Sequence

EPSILON = 1e-5

def zeroish(x: float, epsilon: float = EPSILON) -> bool:
    return abs(x) < epsilon

def add(a: complex, b: complex) -> complex:
    return complex(a) + complex(b)

def multiply(a: complex, b: complex) -> complex:
    a, b = complex(a), complex(b)
    return complex(a.real*b.real - a.imag*b.imag, a.real*b.imag + a.imag*b.real)

def norm_squared(a: complex) -> float:
    a = complex(a)
    return a.real*a.real + a.imag*a.imag

def square_real(a: complex) -> float:
    """re^2 - im^2, the real part of a*a (not a magnitude)."""
    a = complex(a)
    return a.real*a.real - a.imag*a.imag

def approx_equal(a: complex, b: complex, epsilon: float = EPSILON) -> bool:
    a, b = complex(a), complex(b)
    return zeroish(a.real - b.real, epsilon) and zeroish(a.imag - b.imag, epsilon)

def to_pair(a: complex) -> list:
    a = complex(a)
    return [a.real, a.imag]

def from_pair(pair: Sequence[float]) -> complex:
    re, im = pair
    return complex(float(re), float(im))
