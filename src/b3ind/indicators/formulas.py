"""Closed-form diversity formulas on abundance vectors.

All functions take raw per-species abundances (occurrence counts) and drop
zero-abundance species before any logarithm is taken, so ``log(0)`` never
occurs and nothing is clamped.
"""

import numpy as np
import pandas as pd
from scipy.stats import entropy

__all__ = [
    'relative_abundances',
    'shannon_entropy',
    'hill_number',
    'pielou_evenness',
    'williams_evenness',
    'rarity_weights',
    'taxonomic_distances',
    'taxonomic_distinctness',
]

TAXONOMIC_SCALE = 100.0


def relative_abundances(abundances) -> np.ndarray:
    """Proportions of the strictly positive abundances."""
    a = np.asarray(abundances, dtype=float)
    a = a[a > 0]
    if a.size == 0:
        return a
    return a / a.sum()


def shannon_entropy(abundances) -> float:
    """Shannon entropy H (natural log). 0 for one species, NaN for none."""
    p = relative_abundances(abundances)
    if p.size == 0:
        return np.nan
    return float(entropy(p))


def hill_number(abundances, order: float) -> float:
    """Hill number of the given order.

    q=0 is richness, q=1 is exp(Shannon entropy), q=2 is inverse Simpson.
    An empty abundance vector has diversity 0.
    """
    p = relative_abundances(abundances)
    if p.size == 0:
        return 0.0
    if order == 0:
        return float(p.size)
    if order == 1:
        return float(np.exp(entropy(p)))
    return float(np.sum(p ** order) ** (1.0 / (1.0 - order)))


def pielou_evenness(abundances) -> float:
    """Pielou's J = H / ln(S).

    One species is perfectly even (1.0); no species is undefined (NaN).
    """
    p = relative_abundances(abundances)
    if p.size == 0:
        return np.nan
    if p.size == 1:
        return 1.0
    return float(entropy(p) / np.log(p.size))


def williams_evenness(abundances) -> float:
    """Hill number of order 1 divided by richness.

    One species gives 1.0; no species gives NaN.
    """
    p = relative_abundances(abundances)
    if p.size == 0:
        return np.nan
    if p.size == 1:
        return 1.0
    return float(np.exp(entropy(p)) / p.size)


def rarity_weights(shares: pd.Series) -> pd.Series:
    """Inverse weights ``1/share - 1`` for shares in (0, 1].

    A species holding the whole share (all abundance, or every occupied
    cell) weighs 0. Non-positive shares give NaN.
    """
    shares = shares.astype(float)
    return (1.0 / shares.where(shares > 0)) - 1.0


def taxonomic_distances(taxa: pd.DataFrame, ranks) -> np.ndarray:
    """Pairwise taxonomic distances between the rows of ``taxa``.

    ``ranks`` runs from the highest rank to the lowest (e.g. kingdom ...
    genus); species are the implicit level below the last rank. Each step
    from species up to the lowest shared rank is worth
    ``100 / (len(ranks) + 1)``, so species without any shared rank are 100
    apart. Missing rank values never match.
    """
    n = len(taxa)
    n_levels = len(ranks) + 1
    steps = np.full((n, n), float(n_levels))

    # Highest rank first; lower ranks overwrite with smaller step counts
    for i, rank in enumerate(ranks):
        values = taxa[rank].to_numpy(dtype=object)
        known = ~pd.isna(values)
        same = (values[:, None] == values[None, :]) & known[:, None] & known[None, :]
        steps[same] = float(n_levels - 1 - i)

    np.fill_diagonal(steps, 0.0)
    return steps * (TAXONOMIC_SCALE / n_levels)


def taxonomic_distinctness(taxa: pd.DataFrame, ranks) -> float:
    """Average taxonomic distinctness: mean distance over all species pairs.

    Needs at least two species, otherwise NaN.
    """
    n = len(taxa)
    if n < 2:
        return np.nan
    distances = taxonomic_distances(taxa, ranks)
    upper = np.triu_indices(n, k=1)
    return float(distances[upper].mean())
