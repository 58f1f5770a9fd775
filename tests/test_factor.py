"""
Tests for network/factor.py - tabular factors and CPD factors.
"""

import numpy as np
import pytest
from bnrevise.errors import InvalidArgumentError
from bnrevise.network import TabularFactor, TabularCPDFactor


@pytest.fixture
def rvs(A, B, C):
    return {"A": A, "B": B, "C": C}


class TestTabularFactor:
    """Tests for TabularFactor"""

    def test_shape_checked(self, rvs):
        with pytest.raises(InvalidArgumentError):
            TabularFactor(["A", "C"], rvs, np.ones((2, 2)))
        with pytest.raises(InvalidArgumentError):
            TabularFactor(["A", "A"], rvs, np.ones((2, 2)))

    def test_evaluate(self, rvs):
        f = TabularFactor(["A", "B"], rvs, [[1.0, 2.0], [3.0, 4.0]])
        assert f.evaluate({"A": "a1", "B": "b0"}) == 3.0
        assert "A" in f and "C" not in f
        assert list(f) == ["A", "B"]

    def test_product_aligns_scopes(self, rvs):
        f1 = TabularFactor(["A", "B"], rvs, [[1.0, 2.0], [3.0, 4.0]])
        f2 = TabularFactor(["B", "C"], rvs, np.arange(6, dtype=float).reshape(2, 3))
        prod = f1.product(f2)
        assert prod.scope == ("A", "B", "C")
        assert prod.values[1, 0, 2] == pytest.approx(3.0 * 2.0)
        np.testing.assert_allclose(prod.values, f1.didactic_product(f2).values)

    def test_marginalize(self, rvs):
        f = TabularFactor(["A", "B"], rvs, [[1.0, 2.0], [3.0, 4.0]])
        m = f.marginalize({"A"})
        assert m.scope == ("B",)
        np.testing.assert_allclose(m.values, [4.0, 6.0])

    def test_normalize(self, rvs):
        f = TabularFactor(["A"], rvs, [1.0, 3.0]).normalize()
        np.testing.assert_allclose(f.values, [0.25, 0.75])
        with pytest.raises(InvalidArgumentError):
            TabularFactor(["A"], rvs, [0.0, 0.0]).normalize()

    def test_to_joint(self, rvs):
        joint = TabularFactor(["B", "A"], rvs, [[0.1, 0.2], [0.3, 0.4]]).to_joint()
        assert joint.names == ("B", "A")
        assert joint.entry((1, 0)) == pytest.approx(0.3)

    def test_display(self, rvs):
        text = TabularFactor(["A"], rvs, [0.5, 0.5]).display(factor_name="phi")
        assert "phi" in text and "a1" in text


class TestTabularCPDFactor:
    """Tests for TabularCPDFactor"""

    def test_rows(self, rvs):
        cpd = TabularCPDFactor(["A"], "B", rvs, [[0.7, 0.3], [0.2, 0.8]])
        assert cpd.parents == ("A",)
        assert cpd.child == "B"
        assert cpd.scope == ("A", "B")
        np.testing.assert_allclose(cpd.row((1,)), [0.2, 0.8])

    def test_rows_must_sum_to_one(self, rvs):
        with pytest.raises(InvalidArgumentError):
            TabularCPDFactor(["A"], "B", rvs, [[0.7, 0.2], [0.2, 0.8]])

    def test_negative_entries(self, rvs):
        with pytest.raises(InvalidArgumentError):
            TabularCPDFactor([], "A", rvs, [1.5, -0.5])

    def test_display(self, rvs):
        text = TabularCPDFactor(["A"], "B", rvs, [[0.7, 0.3], [0.2, 0.8]]).display()
        assert "B=b0" in text and "a1" in text
