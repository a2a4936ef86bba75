"""Tests for closed-form diversity formulas."""

import numpy as np
import pandas as pd
import pytest

from b3ind.indicators.formulas import (
    hill_number,
    pielou_evenness,
    rarity_weights,
    relative_abundances,
    shannon_entropy,
    taxonomic_distances,
    taxonomic_distinctness,
    williams_evenness,
)

pytestmark = pytest.mark.unit


class TestAbundances:

    def test_zero_abundances_dropped(self):
        np.testing.assert_allclose(relative_abundances([2, 0, 2]), [0.5, 0.5])

    def test_shannon_of_even_community(self):
        assert shannon_entropy([5, 5, 5, 5]) == pytest.approx(np.log(4))

    def test_shannon_of_nothing_is_nan(self):
        assert np.isnan(shannon_entropy([0, 0]))


class TestHillNumbers:

    @pytest.mark.parametrize("abundances", [[1], [3, 1], [10, 5, 1, 1], [7, 0, 2]])
    def test_order_zero_is_richness(self, abundances):
        richness = sum(1 for a in abundances if a > 0)
        assert hill_number(abundances, 0) == richness

    @pytest.mark.parametrize("order", [0, 1, 2])
    def test_even_community_equals_richness(self, order):
        assert hill_number([4, 4, 4], order) == pytest.approx(3.0)

    def test_order_two_is_inverse_simpson(self):
        p = np.array([0.5, 0.3, 0.2])
        assert hill_number([5, 3, 2], 2) == pytest.approx(1.0 / np.sum(p ** 2))

    def test_orders_are_non_increasing(self):
        a = [10, 5, 1, 1]
        assert hill_number(a, 0) >= hill_number(a, 1) >= hill_number(a, 2)

    def test_empty_group_is_zero(self):
        assert hill_number([], 1) == 0.0


class TestEvenness:

    @pytest.mark.parametrize("func", [pielou_evenness, williams_evenness])
    def test_single_species_is_one(self, func):
        assert func([12]) == 1.0

    @pytest.mark.parametrize("func", [pielou_evenness, williams_evenness])
    def test_empty_is_nan(self, func):
        assert np.isnan(func([]))

    @pytest.mark.parametrize("func", [pielou_evenness, williams_evenness])
    def test_even_community_is_one(self, func):
        assert func([3, 3, 3, 3]) == pytest.approx(1.0)

    def test_uneven_community_below_one(self):
        assert 0 < pielou_evenness([100, 1]) < 1
        assert 0 < williams_evenness([100, 1]) < 1


class TestRarity:

    def test_sole_species_weighs_zero(self):
        weights = rarity_weights(pd.Series({"a": 1.0}))
        assert weights["a"] == 0.0

    def test_weights(self):
        weights = rarity_weights(pd.Series({"a": 0.5, "b": 0.25, "c": 0.0}))

        assert weights["a"] == pytest.approx(1.0)
        assert weights["b"] == pytest.approx(3.0)
        assert np.isnan(weights["c"])


class TestTaxonomicDistinctness:

    RANKS = ["family", "genus"]

    def test_distances_by_shared_rank(self):
        taxa = pd.DataFrame(
            {"family": ["F1", "F1", "F1", "F2"], "genus": ["G1", "G1", "G2", "G3"]},
            index=["a", "b", "c", "d"],
        )

        d = taxonomic_distances(taxa, self.RANKS)
        step = 100.0 / 3

        assert d[0, 0] == 0.0
        assert d[0, 1] == pytest.approx(step)        # same genus
        assert d[0, 2] == pytest.approx(2 * step)    # same family
        assert d[0, 3] == pytest.approx(100.0)       # nothing shared
        np.testing.assert_allclose(d, d.T)

    def test_missing_rank_never_matches(self):
        taxa = pd.DataFrame({"family": [None, None], "genus": [None, None]}, index=["a", "b"])
        assert taxonomic_distances(taxa, self.RANKS)[0, 1] == pytest.approx(100.0)

    def test_fewer_than_two_species_is_nan(self):
        taxa = pd.DataFrame({"family": ["F1"], "genus": ["G1"]}, index=["a"])
        assert np.isnan(taxonomic_distinctness(taxa, self.RANKS))

    def test_mean_of_pairs(self):
        taxa = pd.DataFrame({"family": ["F1", "F1", "F2"], "genus": ["G1", "G2", "G3"]},
                            index=["a", "b", "c"])
        step = 100.0 / 3
        # pairs: a-b same family (2 steps), a-c and b-c nothing shared (3 steps)
        expected = (2 * step + 100.0 + 100.0) / 3
        assert taxonomic_distinctness(taxa, self.RANKS) == pytest.approx(expected)

    def test_without_ranks_all_species_differ(self):
        taxa = pd.DataFrame(index=["a", "b"])
        assert taxonomic_distinctness(taxa, []) == pytest.approx(100.0)
