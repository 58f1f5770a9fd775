"""
Tests for dist/variable.py - RandomVariable.
"""

import pytest
from bnrevise.errors import InvalidArgumentError
from bnrevise.dist import RandomVariable


class TestRandomVariable:
    """Tests for construction and state lookup"""

    def test_states_and_index(self):
        rv = RandomVariable("Rain", ["no", "yes"])
        assert rv.name == "Rain"
        assert rv.states == ("no", "yes")
        assert len(rv) == 2
        assert list(rv) == ["no", "yes"]
        assert rv.index("yes") == 1
        assert rv.state(0) == "no"
        assert "yes" in rv
        assert "maybe" not in rv

    def test_unknown_state(self):
        rv = RandomVariable("Rain", ["no", "yes"])
        with pytest.raises(InvalidArgumentError):
            rv.index("maybe")

    @pytest.mark.parametrize("name,states", [
        ("", ["a"]),
        ("X", []),
        ("X", ["a", "a"]),
        ("X", ["a", ""]),
    ])
    def test_invalid(self, name, states):
        with pytest.raises(InvalidArgumentError):
            RandomVariable(name, states)

    def test_equality(self):
        assert RandomVariable("X", ["a", "b"]) == RandomVariable("X", ["a", "b"])
        assert RandomVariable("X", ["a", "b"]) != RandomVariable("X", ["b", "a"])
        assert RandomVariable("X", ["a", "b"]) != RandomVariable("Y", ["a", "b"])
        assert len({RandomVariable("X", ["a"]), RandomVariable("X", ["a"])}) == 1

    def test_copy(self):
        rv = RandomVariable("X", ["a", "b"])
        assert rv.copy() == rv
        assert rv.copy() is not rv

    def test_enumerate_joint_states(self):
        x = RandomVariable("X", ["x0", "x1"])
        y = RandomVariable("Y", ["y0", "y1", "y2"])
        joint = list(RandomVariable.enumerate_joint_states(x, y))
        assert len(joint) == 6
        assert joint[0] == ("x0", "y0")
        assert joint[1] == ("x0", "y1")
        assert joint[-1] == ("x1", "y2")
