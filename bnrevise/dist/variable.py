import itertools
from bnrevise.errors import InvalidArgumentError


class RandomVariable:
    """
    A named discrete random variable with an ordered, finite set of states.

    Each state is mapped to a unique 0-based identifier (its position),
     this way we can use an np.array to store a dense representation of a table;
     each axis is associated with a random variable and the identifier of a state
     is the index along that axis.

    Two random variables are the same if they have the same name and list the same states in the same order.
    """

    def __init__(self, name: str, states):
        """
        name: a non-empty string
        states: an iterable of non-empty strings, at least one, no repetitions
        """
        if not isinstance(name, str) or name == "":
            raise InvalidArgumentError("A random variable needs a non-empty name")
        states = tuple(states)
        if len(states) == 0:
            raise InvalidArgumentError(f"Random variable {name} needs at least one state")
        self._state2id = dict()
        for i, state in enumerate(states):
            if not isinstance(state, str) or state == "":
                raise InvalidArgumentError(f"Random variable {name} has an empty state name")
            if state in self._state2id:
                raise InvalidArgumentError(f"Random variable {name} lists state {state} twice")
            self._state2id[state] = i
        self._name = name
        self._states = states

    @property
    def name(self):
        return self._name

    @property
    def states(self):
        return self._states

    def __len__(self):
        """Return the number of states"""
        return len(self._states)

    def __iter__(self):
        """Iterate over states"""
        return iter(self._states)

    def __contains__(self, state):
        return state in self._state2id

    def index(self, state: str) -> int:
        """Get the id corresponding to a state"""
        try:
            return self._state2id[state]
        except KeyError:
            raise InvalidArgumentError(f"Random variable {self._name} has no state {state}") from None

    def state(self, idx: int) -> str:
        return self._states[idx]

    def copy(self) -> 'RandomVariable':
        return RandomVariable(self._name, self._states)

    def __eq__(self, other):
        if not isinstance(other, RandomVariable):
            return NotImplemented
        return self._name == other._name and self._states == other._states

    def __hash__(self):
        return hash((self._name, self._states))

    def __repr__(self):
        return f"RandomVariable({self._name!r}, {list(self._states)!r})"

    def __str__(self):
        return "%s {%s}" % (self._name, ', '.join(self._states))

    @classmethod
    def enumerate_joint_states(cls, *variables):
        """
        Return a generator for joint states in the product space of the given variables,
         in row-major order (the last variable changes fastest).
        """
        for joint_state in itertools.product(*variables):
            yield joint_state
