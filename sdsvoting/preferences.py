"""
Agendas, preference orders and preference profiles.

.. important::

    - An agenda consists of a finite, non-empty set of agents and a finite, non-empty set
      of alternatives. Agents and alternatives can be arbitrary hashable objects.
    - Preference orders are complete preorders (weak orders). They are stored as weak rankings,
      i.e., as sequences of indifference classes, **best class first**.
    - A preference profile assigns a preference order to every agent of the agenda.
    - All these objects are immutable.

"""

import enum
import itertools
from collections import Counter
from collections.abc import Mapping
import networkx as nx

from sdsvoting import misc
from sdsvoting.misc import OutOfDomainException


class EmptyAgentsException(ValueError):
    """Error: an agenda must contain at least one agent."""

    def __init__(self):
        super().__init__("The set of agents must not be empty.")


class EmptyAlternativesException(ValueError):
    """Error: an agenda must contain at least one alternative."""

    def __init__(self):
        super().__init__("The set of alternatives must not be empty.")


class InvalidOrderException(ValueError):
    """Error: the relation is not a complete preorder over the alternatives of the agenda."""


class IncompleteProfileException(ValueError):
    """Error: not every agent of the agenda is assigned exactly one preference order."""


class Comparison(enum.Enum):
    """Result of `PreferenceOrder.compare`."""

    BETTER = "better"
    WORSE_OR_EQUAL = "worse-or-equal"


class Agenda:
    """
    A finite set of agents and a finite set of alternatives.

    Parameters
    ----------
        agents : iterable
            The agents (hashable objects).

        alternatives : iterable
            The alternatives (hashable objects).

            For example, `alternatives="abc"` gives the alternatives `"a"`, `"b"` and `"c"`.

    Attributes
    ----------
        agents : tuple

            The agents in the given order.

        alternatives : tuple

            The alternatives in the given order.
    """

    def __init__(self, agents, alternatives):
        self.agents = tuple(agents)
        self.alternatives = tuple(alternatives)
        if len(self.agents) == 0:
            raise EmptyAgentsException()
        if len(self.alternatives) == 0:
            raise EmptyAlternativesException()
        self._agent_set = frozenset(self.agents)
        self._alternative_set = frozenset(self.alternatives)
        if len(self._agent_set) != len(self.agents):
            raise ValueError(f"Agenda initialized with duplicate agents ({self.agents}).")
        if len(self._alternative_set) != len(self.alternatives):
            raise ValueError(
                f"Agenda initialized with duplicate alternatives ({self.alternatives})."
            )

    @property
    def num_agents(self):
        """Number of agents."""
        return len(self.agents)

    @property
    def num_alternatives(self):
        """Number of alternatives."""
        return len(self.alternatives)

    @property
    def alternative_set(self):
        """The alternatives as frozenset."""
        return self._alternative_set

    @property
    def agent_set(self):
        """The agents as frozenset."""
        return self._agent_set

    def check_alternative(self, alternative):
        """Raise `OutOfDomainException` if `alternative` is not part of the agenda."""
        if alternative not in self._alternative_set:
            raise OutOfDomainException(alternative, kind="alternative")

    def check_agent(self, agent):
        """Raise `OutOfDomainException` if `agent` is not part of the agenda."""
        if agent not in self._agent_set:
            raise OutOfDomainException(agent, kind="agent")

    def __eq__(self, other):
        if not isinstance(other, Agenda):
            return NotImplemented
        return (
            self._agent_set == other._agent_set
            and self._alternative_set == other._alternative_set
        )

    def __hash__(self):
        return hash((self._agent_set, self._alternative_set))

    def __repr__(self):
        return f"Agenda(agents={self.agents!r}, alternatives={self.alternatives!r})"

    def __str__(self):
        return (
            f"agenda with {self.num_agents} agents and {self.num_alternatives} alternatives "
            f"{misc.str_set_of_alternatives(self.alternatives)}"
        )


def make_agenda(agents, alternatives):
    """
    Construct an agenda.

    Raises `EmptyAgentsException` or `EmptyAlternativesException` if one of the sets is empty.

    Parameters
    ----------
        agents : iterable
            The agents.

        alternatives : iterable
            The alternatives.

    Returns
    -------
        Agenda
    """
    return Agenda(agents, alternatives)


def _indifference_class(entry):
    # lists, tuples and sets denote indifference classes, everything else a single alternative
    if isinstance(entry, (list, tuple, set, frozenset)):
        return frozenset(entry), len(entry)
    return frozenset([entry]), 1


class PreferenceOrder:
    """
    A complete preorder (weak order) over a finite set of alternatives.

    The order is given by a weak ranking, i.e., a sequence of disjoint non-empty indifference
    classes, where the first class contains the most preferred alternatives.

    Parameters
    ----------
        weak_ranking : sequence
            The indifference classes, best first.

            Each entry is either an indifference class (a list, tuple or set of alternatives)
            or a single alternative (any other hashable object).

    Examples
    --------
    .. doctest::

        >>> order = PreferenceOrder(["c", {"a", "b"}])
        >>> print(order)
        c > a ~ b
        >>> order.strictly_prefers("c", "a")
        True
        >>> sorted(order.upper_contour_set("a"))
        ['a', 'b', 'c']
    """

    def __init__(self, weak_ranking):
        ranking = []
        seen = set()
        for entry in weak_ranking:
            indifference_class, size = _indifference_class(entry)
            if size == 0:
                raise InvalidOrderException("Indifference classes must not be empty.")
            if len(indifference_class) != size or seen & indifference_class:
                raise InvalidOrderException(
                    f"Weak ranking {list(weak_ranking)} contains an alternative more than once."
                )
            seen |= indifference_class
            ranking.append(indifference_class)
        if not ranking:
            raise InvalidOrderException("A weak ranking must contain at least one alternative.")

        self._ranking = tuple(ranking)
        self._rank = {alt: i for i, cls in enumerate(self._ranking) for alt in cls}
        # `_upper[i]` is the union of the `i+1` best indifference classes
        upper = []
        union = frozenset()
        for indifference_class in self._ranking:
            union = union | indifference_class
            upper.append(union)
        self._upper = tuple(upper)
        self.alternatives = union

    def _check(self, alternative):
        if alternative not in self._rank:
            raise OutOfDomainException(alternative, kind="alternative")

    def weak_ranking(self):
        """
        The indifference classes of this order, best first.

        Returns
        -------
            tuple of frozenset
        """
        return self._ranking

    def rank(self, alternative):
        """
        Index of the indifference class containing `alternative` (`0` for the best class).

        Returns
        -------
            int
        """
        self._check(alternative)
        return self._rank[alternative]

    def top(self):
        """The most preferred alternatives (the first indifference class)."""
        return self._ranking[0]

    def compare(self, x, y):
        """
        Compare two alternatives.

        Parameters
        ----------
            x, y : object
                Two alternatives.

        Returns
        -------
            Comparison
                `Comparison.BETTER` if `x` is strictly preferred to `y`,
                `Comparison.WORSE_OR_EQUAL` otherwise.
        """
        if self.strictly_prefers(x, y):
            return Comparison.BETTER
        return Comparison.WORSE_OR_EQUAL

    def weakly_prefers(self, x, y):
        """Test whether `x` is at least as good as `y`."""
        self._check(x)
        self._check(y)
        return self._rank[x] <= self._rank[y]

    def strictly_prefers(self, x, y):
        """Test whether `x` is strictly better than `y`."""
        self._check(x)
        self._check(y)
        return self._rank[x] < self._rank[y]

    def indifferent(self, x, y):
        """Test whether `x` and `y` are in the same indifference class."""
        self._check(x)
        self._check(y)
        return self._rank[x] == self._rank[y]

    def upper_contour_set(self, alternative):
        """
        All alternatives that are at least as good as `alternative` (including itself).

        Returns
        -------
            frozenset
        """
        self._check(alternative)
        return self._upper[self._rank[alternative]]

    def upper_contour_sets(self):
        """
        All distinct upper contour sets, from the smallest to the full set of alternatives.

        Returns
        -------
            tuple of frozenset
        """
        return self._upper

    def is_linear(self):
        """Test whether this order is strict (i.e., contains no ties)."""
        return all(len(indifference_class) == 1 for indifference_class in self._ranking)

    def permute(self, permutation):
        """
        Rename the alternatives according to a permutation.

        The permuted order `R'` satisfies `R'(sigma(x), sigma(y)) = R(x, y)`.

        Parameters
        ----------
            permutation : dict or callable
                A bijection `sigma` over the alternatives of this order.

        Returns
        -------
            PreferenceOrder
        """
        mapping = misc.check_permutation(permutation, self.alternatives)
        return PreferenceOrder(
            [frozenset(mapping[alt] for alt in cls) for cls in self._ranking]
        )

    def __eq__(self, other):
        if not isinstance(other, PreferenceOrder):
            return NotImplemented
        return self._ranking == other._ranking

    def __hash__(self):
        return hash(self._ranking)

    def __repr__(self):
        return f"PreferenceOrder({[sorted(cls, key=str) for cls in self._ranking]!r})"

    def __str__(self):
        return " > ".join(
            " ~ ".join(sorted(str(alt) for alt in indifference_class))
            for indifference_class in self._ranking
        )


def order_from_relation(alternatives, weakly_prefers):
    """
    Construct a preference order from a binary relation.

    The relation is verified to be reflexive, total (complete) and transitive.
    Indifference classes are the strongly connected components of the relation (viewed
    as a directed graph with an edge from `x` to `y` if `x` is weakly preferred to `y`),
    which are ranked according to a topological sort of the condensation.

    Parameters
    ----------
        alternatives : iterable
            The alternatives.

        weakly_prefers : set of tuple or callable
            Either the set of all pairs `(x, y)` such that `x` is weakly preferred to `y`,
            or a function returning `True` iff `x` is weakly preferred to `y`.

    Returns
    -------
        PreferenceOrder
    """
    alternatives = list(alternatives)
    if callable(weakly_prefers):
        relation = {(x, y) for x in alternatives for y in alternatives if weakly_prefers(x, y)}
    else:
        relation = set(weakly_prefers)
        alternative_set = set(alternatives)
        for pair in relation:
            if len(pair) != 2:
                raise InvalidOrderException(f"{pair!r} is not a pair of alternatives.")
            for alt in pair:
                if alt not in alternative_set:
                    raise OutOfDomainException(alt, kind="alternative")

    for x in alternatives:
        if (x, x) not in relation:
            raise InvalidOrderException(f"Relation is not reflexive (missing ({x!r}, {x!r})).")
    for x, y in itertools.combinations(alternatives, 2):
        if (x, y) not in relation and (y, x) not in relation:
            raise InvalidOrderException(
                f"Relation is not complete ({x!r} and {y!r} are incomparable)."
            )

    graph = nx.DiGraph()
    graph.add_nodes_from(alternatives)
    graph.add_edges_from((x, y) for x, y in relation if x != y)
    condensation = nx.condensation(graph)
    order = PreferenceOrder(
        [condensation.nodes[node]["members"] for node in nx.topological_sort(condensation)]
    )

    # a complete relation coincides with the order induced by its components iff transitive
    for x in alternatives:
        for y in alternatives:
            if ((x, y) in relation) != order.weakly_prefers(x, y):
                raise InvalidOrderException(
                    f"Relation is not transitive (check the pair ({x!r}, {y!r}))."
                )
    return order


def make_order(agenda, relation_data):
    """
    Construct a preference order over the alternatives of an agenda.

    Parameters
    ----------
        agenda : Agenda
            The agenda.

        relation_data : list or tuple or set or callable or PreferenceOrder
            The preferences, given as

            - a weak ranking (a list or tuple of indifference classes, best first),
            - a set of pairs `(x, y)` meaning that `x` is weakly preferred to `y`,
            - a function `weakly_prefers(x, y)`, or
            - a `PreferenceOrder`.

    Returns
    -------
        PreferenceOrder

    Examples
    --------
    .. doctest::

        >>> agenda = Agenda(agents=[1, 2], alternatives="abc")
        >>> print(make_order(agenda, ["c", "b", "a"]))
        c > b > a
        >>> print(make_order(agenda, lambda x, y: x != "a" or y == "a"))
        b ~ c > a
    """
    if isinstance(relation_data, PreferenceOrder):
        order = relation_data
    elif callable(relation_data) or isinstance(relation_data, (set, frozenset)):
        order = order_from_relation(agenda.alternatives, relation_data)
    elif isinstance(relation_data, (list, tuple)):
        order = PreferenceOrder(relation_data)
    else:
        raise TypeError(
            f"Object of type {type(relation_data)} cannot be converted to a preference order."
        )

    for alt in order.alternatives:
        agenda.check_alternative(alt)
    if order.alternatives != agenda.alternative_set:
        missing = agenda.alternative_set - order.alternatives
        raise InvalidOrderException(
            f"Preference order {order} does not rank the alternatives "
            f"{misc.str_set_of_alternatives(missing)}."
        )
    return order


def all_weak_rankings(alternatives):
    """
    Enumerate all preference orders over a finite set of alternatives.

    The number of such orders is the Fubini number (1, 3, 13, 75, 541, ... for
    1, 2, 3, 4, 5, ... alternatives).

    Parameters
    ----------
        alternatives : iterable
            The alternatives.

    Yields
    ------
        PreferenceOrder
    """
    alternatives = list(alternatives)

    def _ordered_partitions(remaining):
        if not remaining:
            yield []
            return
        for size in range(1, len(remaining) + 1):
            for top in itertools.combinations(remaining, size):
                rest = [alt for alt in remaining if alt not in top]
                for partition in _ordered_partitions(rest):
                    yield [frozenset(top)] + partition

    for ranking in _ordered_partitions(alternatives):
        yield PreferenceOrder(ranking)


class Profile(Mapping):
    """
    Preference profiles.

    A preference profile assigns a preference order to every agent of the agenda.
    Profiles are immutable; see `sdsvoting.profileops` for derived profiles.

    Parameters
    ----------
        agenda : Agenda
            The agenda.

        orders : dict or list
            Either a dictionary mapping every agent to its preferences, or a list of
            preferences (one per agent, in the order of `agenda.agents`).

            Preferences can be given in any form accepted by `make_order()`.

    Examples
    --------
    .. doctest::

        >>> agenda = Agenda(agents=[1, 2], alternatives="abc")
        >>> profile = Profile(agenda, [["c", "b", "a"], ["b", "c", "a"]])
        >>> print(profile)
        profile with 2 agents and 3 alternatives:
         agent 1:  c > b > a,
         agent 2:  b > c > a
    """

    def __init__(self, agenda, orders):
        self.agenda = agenda
        if isinstance(orders, Mapping):
            unknown = [agent for agent in orders if agent not in agenda.agent_set]
            if unknown:
                raise IncompleteProfileException(
                    f"The agents {unknown} are not part of the agenda."
                )
            missing = [agent for agent in agenda.agents if agent not in orders]
            if missing:
                raise IncompleteProfileException(
                    f"The agents {missing} are not assigned a preference order."
                )
            self._orders = {agent: make_order(agenda, orders[agent]) for agent in agenda.agents}
        else:
            orders = list(orders)
            if len(orders) != agenda.num_agents:
                raise IncompleteProfileException(
                    f"Got {len(orders)} preference orders for {agenda.num_agents} agents."
                )
            self._orders = {
                agent: make_order(agenda, order) for agent, order in zip(agenda.agents, orders)
            }

    @property
    def agents(self):
        """The agents of the agenda."""
        return self.agenda.agents

    @property
    def alternatives(self):
        """The alternatives of the agenda."""
        return self.agenda.alternatives

    @property
    def num_alternatives(self):
        """Number of alternatives."""
        return self.agenda.num_alternatives

    def __getitem__(self, agent):
        try:
            return self._orders[agent]
        except (KeyError, TypeError):
            raise OutOfDomainException(agent, kind="agent") from None

    def __contains__(self, agent):
        try:
            return agent in self._orders
        except TypeError:
            return False

    def __iter__(self):
        return iter(self.agenda.agents)

    def __len__(self):
        return len(self._orders)

    def __eq__(self, other):
        if not isinstance(other, Profile):
            return NotImplemented
        return self.agenda == other.agenda and self._orders == other._orders

    def __hash__(self):
        return hash((self.agenda, frozenset(self._orders.items())))

    def is_linear(self):
        """Test whether all agents have strict preferences."""
        return all(order.is_linear() for order in self._orders.values())

    def anonymous_profile(self):
        """
        The multiset of preference orders, ignoring the identity of agents.

        Returns
        -------
            collections.Counter
                Maps every preference order to the number of agents holding it.
        """
        return Counter(self._orders.values())

    def __str__(self):
        output = (
            f"profile with {len(self)} agents and {self.num_alternatives} alternatives:\n"
        )
        for agent in self.agenda.agents:
            output += f" agent {str(agent) + ':':3s} {self._orders[agent]},\n"
        return output[:-2]

    def __repr__(self):
        return f"Profile({self.agenda!r}, {self._orders!r})"


def make_profile(agenda, agent_to_order):
    """
    Construct a preference profile.

    Raises `IncompleteProfileException` if an agent of the agenda has no preference order
    or if a preference order is given for an agent that is not part of the agenda.

    Parameters
    ----------
        agenda : Agenda
            The agenda.

        agent_to_order : dict or list
            Preferences of the agents (see `Profile`).

    Returns
    -------
        Profile
    """
    return Profile(agenda, agent_to_order)
