"""
Reconciles the broad (historical) and precise (API) match sources into one
deduplicated, chronologically ordered sequence.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple
import logging

from fussball_elo.core.exceptions import MergeAmbiguityWarning
from fussball_elo.models.entities import DedupKey, MatchRecord

logger = logging.getLogger(__name__)

# Precise records win ties that survive (timestamp, id)
SOURCE_PRECEDENCE = {'precise': 0, 'broad': 1}


@dataclass
class MergeResult:
    matches: List[MatchRecord]
    broad_kept: int = 0
    broad_dropped: int = 0
    precise_kept: int = 0
    warnings: List[MergeAmbiguityWarning] = field(default_factory=list)
    duplicate_ids: List[int] = field(default_factory=list)


class SourceMerger:
    """
    Dedup key = (calendar date, home team, away team).

    Every broad record whose key exists in the precise source is dropped.
    Team names must already be aligned between the sources; there is no
    fuzzy matching here.
    """

    def _dedup_within(self, source: str, records: Sequence[MatchRecord],
                      warnings: List[MergeAmbiguityWarning]) -> Dict[DedupKey, MatchRecord]:
        """First record per key wins, in input order."""
        by_key: Dict[DedupKey, MatchRecord] = {}
        for record in records:
            key = record.dedup_key
            kept = by_key.get(key)
            if kept is None:
                by_key[key] = record
                continue
            warning = MergeAmbiguityWarning(source, key, kept.id, record.id)
            logger.warning(str(warning))
            warnings.append(warning)
        return by_key

    def merge(self, broad: Sequence[MatchRecord], precise: Sequence[MatchRecord]) -> MergeResult:
        warnings: List[MergeAmbiguityWarning] = []

        precise_by_key = self._dedup_within('precise', precise, warnings)
        broad_by_key = self._dedup_within('broad', broad, warnings)

        tagged: List[Tuple[str, int, MatchRecord]] = []
        for position, record in enumerate(precise_by_key.values()):
            tagged.append(('precise', position, record))

        broad_kept = 0
        for position, record in enumerate(broad_by_key.values()):
            if record.dedup_key in precise_by_key:
                continue
            tagged.append(('broad', position, record))
            broad_kept += 1

        tagged.sort(key=lambda t: (t[2].timestamp, t[2].id, SOURCE_PRECEDENCE[t[0]], t[1]))
        matches = [record for _, _, record in tagged]

        id_counts = Counter(m.id for m in matches)
        duplicate_ids = sorted(match_id for match_id, n in id_counts.items() if n > 1)
        if duplicate_ids:
            logger.warning(f"{len(duplicate_ids)} match ids appear more than once after merging "
                           f"(first: {duplicate_ids[:5]})")

        if not broad or not precise:
            logger.info("One match source is empty; merged coverage may be reduced")

        result = MergeResult(
            matches=matches,
            broad_kept=broad_kept,
            broad_dropped=len(broad) - broad_kept,
            precise_kept=len(precise_by_key),
            warnings=warnings,
            duplicate_ids=duplicate_ids,
        )
        logger.info(
            f"Merged {len(matches)} matches: {result.precise_kept} precise, "
            f"{broad_kept} broad ({result.broad_dropped} broad records dropped)"
        )
        return result
