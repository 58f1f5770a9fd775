"""
Tests for util.py - pandas and tabulate views.
"""

import numpy as np
import pytest
from bnrevise.util import (
    joint_to_df,
    df_to_joint,
    conditional_to_df,
    network_to_df,
    beliefs_to_df,
    display_full_table,
    display_cpt,
)
from bnrevise.errors import InvalidArgumentError


class TestDataFrames:
    """Tests for the DataFrame views"""

    def test_joint_to_df(self, random_abc):
        df = joint_to_df(random_abc)
        assert list(df.columns) == ["A", "B", "C", "P"]
        assert len(df) == 12
        assert df["P"].sum() == pytest.approx(1.0)
        assert tuple(df.iloc[1][["A", "B", "C"]]) == ("a0", "b0", "c1")

    def test_df_round_trip(self, random_abc):
        df = joint_to_df(random_abc)
        back = df_to_joint(df, random_abc.variables)
        np.testing.assert_allclose(back.values, random_abc.values)

    def test_missing_rows_are_filled(self, random_abc):
        df = joint_to_df(random_abc).iloc[1:]
        back = df_to_joint(df, random_abc.variables, miss_value=0.0)
        assert back.entry((0, 0, 0)) == 0.0

    def test_conditional_to_df(self, random_abc):
        df = conditional_to_df(random_abc.conditional(["A"], ["B"]))
        assert list(df.columns) == ["B", "A", "P"]
        assert df.groupby("B")["P"].sum().tolist() == pytest.approx([1.0, 1.0])

    def test_network_views(self, chain_network):
        df = network_to_df(chain_network, ["C"])
        assert df["P"].tolist() == pytest.approx([0.65, 0.35])
        beliefs = beliefs_to_df(chain_network)
        assert len(beliefs) == 6
        assert beliefs[beliefs.node == "B"]["belief"].tolist() == pytest.approx([0.5, 0.5])


class TestDisplay:
    """Tests for the tabulate views"""

    def test_display_full_table(self, chain_network):
        text = display_full_table(chain_network)
        assert "a0" in text and "c1" in text

    def test_display_cpt(self, sprinkler_network):
        text = display_cpt(sprinkler_network, "WetGrass")
        assert "WetGrass=wet" in text and "Sprinkler" in text
        with pytest.raises(InvalidArgumentError):
            display_cpt(sprinkler_network, "Sun")
