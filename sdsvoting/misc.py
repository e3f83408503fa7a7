"""
Miscellaneous functions for alternatives, sets of alternatives and probabilities.
"""

import math
import numbers
import numpy as np
from fractions import Fraction

FLOAT_ISCLOSE_REL_TOL = 1e-12
"""
The relative tolerance when comparing floats.

See also: `math.isclose() <https://docs.python.org/3/library/math.html#math.isclose>`_.
"""

FLOAT_ISCLOSE_ABS_TOL = 1e-12
"""
The absolute tolerance when comparing floats.

See also: `math.isclose() <https://docs.python.org/3/library/math.html#math.isclose>`_.
"""


class OutOfDomainException(ValueError):
    """
    Error: a query refers to an alternative or agent that is not part of the agenda.

    Parameters
    ----------
        element : object
            The unknown alternative or agent.

        kind : str, optional
            Either "alternative" or "agent".
    """

    def __init__(self, element, kind="alternative"):
        self.element = element
        self.kind = kind
        super().__init__(f"The {kind} {element!r} is not part of the agenda.")


def str_set_of_alternatives(alternatives):
    """
    Nicely format a set of alternatives.

    .. doctest::

        >>> print(str_set_of_alternatives({"c", "a", "b"}))
        {a, b, c}
        >>> print(str_set_of_alternatives({0, 3, 1}))
        {0, 1, 3}

    Parameters
    ----------
        alternatives : iterable
            An iterable of alternatives.

    Returns
    -------
        str
    """
    return "{" + ", ".join(sorted(str(alt) for alt in alternatives)) + "}"


def header(text, symbol="-"):
    """
    Format a header for `text`.

    Parameters
    ----------
        text : str
            Header text.

        symbol : str
            Symbol to be used for the box around the header text; should be exactly 1 character.

    Returns
    -------
        str
    """
    border = symbol[0] * len(text) + "\n"
    return border + text + "\n" + border


def check_permutation(permutation, domain):
    """
    Verify that `permutation` is a bijection from `domain` onto `domain`.

    Parameters
    ----------
        permutation : dict or callable
            The permutation, either as dictionary or as function.

        domain : iterable
            The finite set that is permuted.

    Returns
    -------
        dict
            The permutation as dictionary (restricted to `domain`).
    """
    domain = list(domain)
    if callable(permutation):
        mapping = {element: permutation(element) for element in domain}
    else:
        missing = [element for element in domain if element not in permutation]
        if missing:
            raise ValueError(f"Permutation is undefined for {missing}.")
        mapping = {element: permutation[element] for element in domain}
    if set(mapping.values()) != set(domain):
        raise ValueError(f"{mapping} is not a bijection over {str_set_of_alternatives(domain)}.")
    return mapping


def to_fraction(value):
    """
    Convert a probability to an exact fraction.

    Integers and fractions are converted exactly. Floats and strings are converted via their
    decimal representation, i.e., `0.1` becomes `1/10` (and not the binary approximation
    of 0.1). Strings may also be of the form `"1/3"`.

    .. doctest::

        >>> to_fraction(0.1)
        (Fraction(1, 10), True)
        >>> to_fraction("1/3")
        (Fraction(1, 3), False)

    Parameters
    ----------
        value : int or Fraction or float or str
            The value to be converted.

    Returns
    -------
        tuple of (Fraction, bool)
            The fraction and whether the input was a (possibly inexact) float.
    """
    if isinstance(value, bool):
        raise TypeError(f"{value!r} is not a valid probability.")
    if isinstance(value, (Fraction, int, np.integer)):
        return Fraction(int(value) if isinstance(value, np.integer) else value), False
    if isinstance(value, (float, np.floating)):
        if not math.isfinite(value):
            raise ValueError(f"{value!r} is not a valid probability.")
        return Fraction(repr(float(value))), True
    if isinstance(value, str):
        return Fraction(value.strip()), False
    if isinstance(value, numbers.Rational):
        return Fraction(value.numerator, value.denominator), False
    raise TypeError(f"Object of type {type(value)} is not suitable as probability.")


def isclose(x, y):
    """
    Compare two floats using the sdsvoting default values for absolute and relative tolerance.

    Parameters
    ----------
        x, y : float
            Two floats.

    Returns
    -------
        bool
    """
    return math.isclose(x, y, rel_tol=FLOAT_ISCLOSE_REL_TOL, abs_tol=FLOAT_ISCLOSE_ABS_TOL)
