"""
Lotteries, i.e., probability distributions over alternatives.

Probabilities are stored as exact fractions (`fractions.Fraction`), see `misc.to_fraction()`
for how floats and strings are converted.
"""

from collections.abc import Mapping
from fractions import Fraction

from sdsvoting import misc


class InvalidLotteryException(ValueError):
    """Error: probabilities are negative, do not sum to 1, or refer to unknown alternatives."""


class Lottery:
    """
    A probability distribution over a finite set of alternatives.

    Only alternatives with positive probability (the support) are stored.
    Two lotteries are equal iff they assign the same probability to every alternative.

    Parameters
    ----------
        probabilities : dict
            Maps alternatives to probabilities (int, Fraction, float or str such as `"1/3"`).

            Probabilities must be non-negative and sum to 1. If floats are involved, a sum
            that is close to 1 (see `misc.isclose()`) is accepted and the probabilities are
            normalized to sum to exactly 1.

    Examples
    --------
    .. doctest::

        >>> lottery = Lottery({"a": 0.5, "b": "1/4", "c": Fraction(1, 4)})
        >>> print(lottery)
        {a: 1/2, b: 1/4, c: 1/4}
        >>> lottery.probability_of_set({"a", "b"})
        Fraction(3, 4)
    """

    def __init__(self, probabilities):
        if isinstance(probabilities, Lottery):
            probabilities = probabilities._probabilities
        elif not isinstance(probabilities, Mapping):
            probabilities = dict(probabilities)

        self._probabilities = {}
        inexact = False
        for alt, value in probabilities.items():
            try:
                prob, is_float = misc.to_fraction(value)
            except (TypeError, ValueError, ZeroDivisionError) as error:
                raise InvalidLotteryException(
                    f"Invalid probability {value!r} for alternative {alt!r}."
                ) from error
            if prob < 0:
                raise InvalidLotteryException(
                    f"Negative probability {value!r} for alternative {alt!r}."
                )
            inexact = inexact or is_float
            if prob > 0:
                self._probabilities[alt] = prob

        total = sum(self._probabilities.values())
        if total != 1:
            if inexact and total > 0 and misc.isclose(float(total), 1.0):
                self._probabilities = {
                    alt: prob / total for alt, prob in self._probabilities.items()
                }
            else:
                raise InvalidLotteryException(
                    f"Probabilities sum to {total} instead of 1 ({dict(probabilities)})."
                )

    @classmethod
    def point_mass(cls, alternative):
        """The lottery that selects `alternative` with probability 1."""
        return cls({alternative: 1})

    def probability(self, alternative):
        """
        The probability of `alternative` (`0` if it is not in the support).

        Returns
        -------
            Fraction
        """
        return self._probabilities.get(alternative, Fraction(0))

    def probability_of_set(self, alternatives):
        """
        The probability that the lottery selects one of `alternatives`.

        Parameters
        ----------
            alternatives : iterable
                A set of alternatives.

        Returns
        -------
            Fraction
        """
        return sum(
            (self._probabilities.get(alt, 0) for alt in set(alternatives)), Fraction(0)
        )

    def support(self):
        """
        All alternatives with positive probability.

        Returns
        -------
            frozenset
        """
        return frozenset(self._probabilities)

    def items(self):
        """Pairs `(alternative, probability)` of the support."""
        return self._probabilities.items()

    def map_alternatives(self, function):
        """
        Push the distribution forward through `function`.

        Probabilities of alternatives with the same image are summed. With a permutation
        `sigma`, this yields the lottery `q` with `q(sigma(x)) = p(x)`.

        Parameters
        ----------
            function : dict or callable
                Maps alternatives (at least those in the support) to alternatives.

        Returns
        -------
            Lottery
        """
        probabilities = {}
        for alt, prob in self._probabilities.items():
            image = function(alt) if callable(function) else function[alt]
            probabilities[image] = probabilities.get(image, Fraction(0)) + prob
        return Lottery(probabilities)

    def __eq__(self, other):
        if not isinstance(other, Lottery):
            return NotImplemented
        return self._probabilities == other._probabilities

    def __hash__(self):
        return hash(frozenset(self._probabilities.items()))

    def __repr__(self):
        return f"Lottery({self._probabilities!r})"

    def __str__(self):
        entries = sorted((str(alt), str(prob)) for alt, prob in self._probabilities.items())
        return "{" + ", ".join(f"{alt}: {prob}" for alt, prob in entries) + "}"


def point_mass(alternative):
    """
    The lottery that selects `alternative` with probability 1.

    Parameters
    ----------
        alternative : object
            An alternative.

    Returns
    -------
        Lottery
    """
    return Lottery.point_mass(alternative)


def uniform_lottery(alternatives):
    """
    The lottery that selects each of `alternatives` with equal probability.

    Parameters
    ----------
        alternatives : iterable
            A non-empty set of alternatives.

    Returns
    -------
        Lottery
    """
    alternatives = set(alternatives)
    if not alternatives:
        raise InvalidLotteryException("A uniform lottery requires at least one alternative.")
    return Lottery({alt: Fraction(1, len(alternatives)) for alt in alternatives})


def make_lottery(agenda, probabilities):
    """
    Construct a lottery over the alternatives of an agenda.

    Raises `InvalidLotteryException` if the probabilities are invalid or refer to alternatives
    outside the agenda.

    Parameters
    ----------
        agenda : sdsvoting.preferences.Agenda
            The agenda.

        probabilities : dict
            Maps alternatives to probabilities.

    Returns
    -------
        Lottery
    """
    lottery = Lottery(probabilities)
    unknown = [
        alt
        for alt in (probabilities if isinstance(probabilities, Mapping) else lottery.support())
        if alt not in agenda.alternative_set
    ]
    if unknown:
        raise InvalidLotteryException(
            f"The alternatives {misc.str_set_of_alternatives(unknown)} are not part of the agenda."
        )
    return lottery
