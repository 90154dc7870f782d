"""
Read-only view of per-team rating histories produced by the rating fold.
"""
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

from fussball_elo.models.entities import RatingObservation, TeamRatingState


class HistoryAccumulator(Mapping):
    """
    Team -> ordered tuple of (date, rating) observations.

    Built once the fold completes; dates are non-decreasing per team.
    """

    def __init__(self, teams: Mapping[str, TeamRatingState]):
        histories: Dict[str, Tuple[RatingObservation, ...]] = {}
        initial: Dict[str, float] = {}

        for name, state in teams.items():
            observations = tuple(state.rating_history)
            for prev, curr in zip(observations, observations[1:]):
                if curr.date < prev.date:
                    raise ValueError(
                        f"History for {name} goes backwards: {prev.date} then {curr.date}"
                    )
            histories[name] = observations
            initial[name] = state.initial_rating

        self._histories = MappingProxyType(histories)
        self._initial = MappingProxyType(initial)

    def __getitem__(self, team: str) -> Tuple[RatingObservation, ...]:
        return self._histories[team]

    def __iter__(self) -> Iterator[str]:
        return iter(self._histories)

    def __len__(self) -> int:
        return len(self._histories)

    def initial_rating(self, team: str) -> float:
        """Rating the team was created with (carried before its first observation)."""
        return self._initial[team]
