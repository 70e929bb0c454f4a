"""One-vs-one voting over pairwise decision values.

Tie-break policy:
- A decision value > 0 votes for the pair's first class (i); a value
  <= 0, including exactly 0.0, votes for the second class (j).
- When several classes share the highest vote count, the one with the
  lowest internal class index wins.
Both rules are deterministic, so the same query always yields the same
class.
"""

from collections.abc import Sequence

from svm_toolkit.data_types import PairwiseSlice
from svm_toolkit.model import TrainedModel


def tally_votes(pair_slices: Sequence[PairwiseSlice], decision_values: Sequence[float], class_count: int) -> list[int]:
    """Count the pairwise votes received by each class.

    Args:
        pair_slices: Pair view of the model, canonical order.
        decision_values: One decision value per pair, same order.
        class_count: Number of classes.

    Returns:
        List of vote counts indexed by internal class index.

    Raises:
        ValueError: If the number of decision values does not match the pairs.
    """
    if len(decision_values) != len(pair_slices):
        raise ValueError(f"Expected {len(pair_slices)} decision values, got {len(decision_values)}")

    votes = [0] * class_count
    for pair, value in zip(pair_slices, decision_values, strict=True):
        if value > 0:
            votes[pair.class_i] += 1
        else:
            votes[pair.class_j] += 1
    return votes


def select_winner(votes: Sequence[int]) -> int:
    """Return the index with the most votes, lowest index on ties."""
    winner = 0
    for i in range(1, len(votes)):
        if votes[i] > votes[winner]:
            winner = i
    return winner


def vote(model: TrainedModel, decision_values: Sequence[float]) -> int:
    """Select the winning internal class index for a classification model.

    Args:
        model: Classification model the decision values came from.
        decision_values: Pairwise decision values, canonical order.

    Returns:
        Internal class index of the winner (0 for single-class models).
    """
    votes = tally_votes(model.pair_slices, decision_values, model.class_count)
    return select_winner(votes)
