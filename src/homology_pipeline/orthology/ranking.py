"""Ranking of ortholog candidates by similarity to the source gene."""

from functools import cmp_to_key

from homology_pipeline.orthology.models import GeneRecord


def _name_matches(candidate: GeneRecord, source: GeneRecord) -> bool:
    return candidate.name.lower() == source.name.lower()


def compare_candidates(a: GeneRecord, b: GeneRecord, source: GeneRecord) -> int:
    """Order two candidates by similarity to the source gene.

    Rules, applied in turn until one decides:
    1. A candidate named like the source (case-insensitive) comes first.
    2. When the candidates' exon counts differ, the one whose exon count
       equals the source's comes first.
    3. When both candidates carry more than one domain and neither
       name-matches, an exact domain count match comes first, otherwise the
       domain count closer to the source's comes first.

    Returns a negative number when a sorts before b, positive when after,
    0 when undecided.
    """
    a_match = _name_matches(a, source)
    b_match = _name_matches(b, source)
    if a_match != b_match:
        return -1 if a_match else 1

    if source.exon_count is not None and a.exon_count != b.exon_count:
        if a.exon_count == source.exon_count:
            return -1
        if b.exon_count == source.exon_count:
            return 1

    if a.domain_count > 1 and b.domain_count > 1 and not a_match and not b_match:
        target = source.domain_count
        a_exact = a.domain_count == target
        b_exact = b.domain_count == target
        if a_exact != b_exact:
            return -1 if a_exact else 1
        a_distance = abs(a.domain_count - target)
        b_distance = abs(b.domain_count - target)
        if a_distance != b_distance:
            return -1 if a_distance < b_distance else 1

    return 0


def rank_candidates(source: GeneRecord, candidates: list[GeneRecord]) -> list[GeneRecord]:
    """Return candidates ordered by similarity to source.

    The sort is stable: candidates no rule can separate keep their input
    order.
    """
    key = cmp_to_key(lambda a, b: compare_candidates(a, b, source))
    return sorted(candidates, key=key)
