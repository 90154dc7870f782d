"""
Parsers for external reference rankings.

Each parser turns one declared document format into an ordered list of
(name, rating) pairs, best team first. The format is always chosen
explicitly by name; documents are never sniffed.
"""
from io import StringIO
from typing import Dict, List, Tuple
import json
import logging

import pandas as pd

from fussball_elo.core.exceptions import ConfigInvalidError

logger = logging.getLogger(__name__)

RankedPairs = List[Tuple[str, float]]


class ReferenceParser:
    """Capability interface: text -> ordered (name, rating) pairs."""

    format_name = ''

    def parse(self, text: str) -> RankedPairs:
        raise NotImplementedError


class RankedJsonParser(ReferenceParser):
    """[{"team": "Arsenal", "elo": 2052, "rank": 1}, ...] ordered by rank."""

    format_name = 'ranked-json'

    def parse(self, text: str) -> RankedPairs:
        data = json.loads(text)
        if not isinstance(data, list):
            raise ConfigInvalidError("ranked-json reference must be a JSON array")

        rows = []
        for position, item in enumerate(data):
            try:
                rows.append((int(item.get('rank', position + 1)), position,
                             str(item['team']), float(item['elo'])))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise ConfigInvalidError(f"ranked-json entry {position} is invalid: {e}") from e

        rows.sort()
        return [(team, elo) for _, _, team, elo in rows]


class RatingMapJsonParser(ReferenceParser):
    """{"Arsenal": 2052, "Bayern Munich": 1996, ...}, ordered by rating."""

    format_name = 'rating-map-json'

    def parse(self, text: str) -> RankedPairs:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ConfigInvalidError("rating-map-json reference must be a JSON object")
        try:
            pairs = [(str(team), float(rating)) for team, rating in data.items()]
        except (TypeError, ValueError) as e:
            raise ConfigInvalidError(f"rating-map-json has a non-numeric rating: {e}") from e
        return sorted(pairs, key=lambda p: p[1], reverse=True)


class ClubEloCsvParser(ReferenceParser):
    """ClubElo API CSV: Rank,Club,Country,Level,Elo,From,To."""

    format_name = 'clubelo-csv'

    def parse(self, text: str) -> RankedPairs:
        try:
            df = pd.read_csv(StringIO(text))
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            raise ConfigInvalidError(f"clubelo-csv reference is unreadable: {e}") from e
        missing = [c for c in ('Club', 'Elo') if c not in df.columns]
        if missing:
            raise ConfigInvalidError(f"clubelo-csv reference is missing columns {missing}")

        df = df.dropna(subset=['Club', 'Elo'])
        df = df.sort_values('Elo', ascending=False, kind='mergesort')
        return [(str(club), float(elo)) for club, elo in zip(df['Club'], df['Elo'])]


PARSERS: Dict[str, ReferenceParser] = {
    parser.format_name: parser
    for parser in (RankedJsonParser(), RatingMapJsonParser(), ClubEloCsvParser())
}


def get_parser(format_name: str) -> ReferenceParser:
    parser = PARSERS.get(format_name)
    if parser is None:
        raise ConfigInvalidError(
            f"Unknown reference format '{format_name}'. Available: {sorted(PARSERS)}"
        )
    return parser


def parse_reference(text: str, format_name: str) -> RankedPairs:
    try:
        pairs = get_parser(format_name).parse(text)
    except json.JSONDecodeError as e:
        raise ConfigInvalidError(f"Reference is not valid JSON: {e}") from e
    logger.info(f"Parsed {len(pairs)} reference teams ({format_name})")
    return pairs
