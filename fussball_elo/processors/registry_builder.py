"""
Team registry derived purely from the merged match set.
"""
from typing import Dict, Iterable
import logging

from fussball_elo.config.league_mappings import get_country
from fussball_elo.models.entities import MatchRecord, RegistryEntry

logger = logging.getLogger(__name__)


class RegistryBuilder:
    """Team -> league, country and appearance count. First-seen league wins."""

    def build(self, matches: Iterable[MatchRecord]) -> Dict[str, RegistryEntry]:
        registry: Dict[str, RegistryEntry] = {}
        mixed = set()

        for match in matches:
            for team in (match.home_team, match.away_team):
                entry = registry.get(team)
                if entry is None:
                    entry = RegistryEntry(league=match.league, country=get_country(match.league))
                    registry[team] = entry
                elif entry.league != match.league:
                    mixed.add(team)
                entry.matches_played += 1

        if mixed:
            logger.debug(f"{len(mixed)} teams appear in more than one league; kept first-seen league")

        logger.info(f"Registry built for {len(registry)} teams")
        return registry
