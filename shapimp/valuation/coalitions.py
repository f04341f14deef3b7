"""
Coalitions and marginal contributions.

A coalition is a canonical sorted tuple of feature names, so structurally
equal coalitions hash equal and can key the value function table directly.
"""

from collections import namedtuple
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from ..data.replacement import OBS_ID
from ..errors import EvaluationError
from .sampling import check_bound_size

Coalition = Tuple

MarginalContribution = namedtuple(
    'MarginalContribution', ['feature', 'permutation', 'before', 'after'])


def make_coalition(features: Iterable) -> Coalition:
    """Canonical representation of a set of features."""
    return tuple(sorted(set(features)))


def coalition_label(coalition: Coalition, sep: str = ',') -> str:
    """Printable label, e.g. 'a,b'. The empty coalition is ''."""
    return sep.join(str(f) for f in coalition)


def marginal_contribution(feature, permutation: Sequence, index: int = 0,
                          bound_size: Optional[int] = None) -> MarginalContribution:
    """
    The coalitions without and with `feature` at its position in `permutation`.

    With `bound_size`, predecessors are cut to the first `bound_size - 1`
    so that the coalition including `feature` has at most `bound_size` members.
    """
    permutation = list(permutation)
    try:
        pos = permutation.index(feature)
    except ValueError:
        raise ValueError(f"Feature {feature!r} is not part of permutation {permutation}")

    predecessors = permutation[:pos]
    if bound_size is not None and len(predecessors) + 1 > bound_size:
        predecessors = predecessors[:bound_size - 1]

    before = make_coalition(predecessors)
    after = make_coalition(predecessors + [feature])
    return MarginalContribution(feature, index, before, after)


def generate_marginal_contributions(feature, permutations: Sequence[Sequence],
                                    bound_size: Optional[int] = None) -> List[MarginalContribution]:
    """One (before, after) record per permutation for a single feature."""
    bound_size = check_bound_size(bound_size)
    return [
        marginal_contribution(feature, perm, index=i, bound_size=bound_size)
        for i, perm in enumerate(permutations)
    ]


def unique_coalitions(records: Iterable[MarginalContribution]) -> List[Coalition]:
    """All coalitions referenced by `records`, deduplicated in first-seen order."""
    seen = {}
    for record in records:
        seen.setdefault(record.before, None)
        seen.setdefault(record.after, None)
    return list(seen)


def marginal_contribution_values(records: Sequence[MarginalContribution],
                                 table: Dict[Coalition, pd.DataFrame]) -> pd.DataFrame:
    """
    Difference value(after) - value(before) for every record.

    Args:
        records: Marginal contribution records
        table: Value function table, one frame per coalition

    Returns:
        Frame with columns feature, permutation, before, after, the index
        columns of the value frames (e.g. obs.id for local values) and one
        column per measure
    """
    frames = []
    for record in records:
        try:
            value_after = table[record.after]
            value_before = table[record.before]
        except KeyError as exc:
            raise EvaluationError(
                f"No value function entry for coalition {exc.args[0]!r}") from exc

        diff = value_after - value_before
        diff = diff.reset_index(drop=diff.index.name != OBS_ID)
        diff.insert(0, 'after', coalition_label(record.after))
        diff.insert(0, 'before', coalition_label(record.before))
        diff.insert(0, 'permutation', record.permutation)
        diff.insert(0, 'feature', record.feature)
        frames.append(diff)

    return pd.concat(frames, ignore_index=True)
