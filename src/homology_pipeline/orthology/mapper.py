"""Ortholog map construction from OrthoDB SPARQL bindings.

Turns raw (source gene, target gene) rows into a deduplicated mapping from
each queried source gene to its distinct target candidates. Handles
semicolon-joined alias names, case variants of the queried names and
repeated target genes.
"""

from typing import Any, Optional

import structlog

from homology_pipeline.orthology.models import GeneRecord, OrthologMapResult

logger = structlog.get_logger()


def orthodb_id_from_uri(uri: str) -> str:
    """Extract the OrthoDB gene ID from a gene URI.

    Example: "http://purl.orthodb.org/odbgene/9606_0:001c7b" -> "9606_0:001c7b"
    """
    return uri.rstrip("/").rsplit("/", 1)[-1]


def binding_value(binding: dict[str, Any], key: str) -> Optional[str]:
    """Read the ``.value`` of one SPARQL binding variable."""
    cell = binding.get(key)
    if not isinstance(cell, dict):
        return None
    value = cell.get("value")
    return str(value) if value is not None else None


def choose_target_alias(raw_name: str) -> str:
    """Pick the most symbol-like name from a semicolon-joined alias list.

    Purely numeric aliases are internal identifiers, so any non-numeric
    alias wins over them. Among non-numeric aliases the shortest wins
    (first one on ties); it is usually the canonical symbol.
    """
    aliases = [a.strip() for a in raw_name.split(";") if a.strip()]
    if not aliases:
        return raw_name.strip()

    symbolic = [a for a in aliases if not a.isdigit()]
    if not symbolic:
        return aliases[0]
    return min(symbolic, key=len)


class OrthologMapBuilder:
    """Builds an ortholog map for one gene query.

    Keys of the resulting map are spelled exactly as in the query, so a
    query for "mtor" is keyed "mtor" even when OrthoDB reports "MTOR".
    """

    def __init__(self, genes: list[str]):
        """Initialize builder.

        Args:
            genes: Queried gene names, already deduplicated case-insensitively
        """
        self.genes = list(genes)
        self._canonical = {g.lower(): g for g in reversed(self.genes)}

    def match_source_alias(self, raw_name: str) -> Optional[tuple[str, str]]:
        """Find the queried gene a raw source name refers to.

        Returns:
            (queried spelling, OrthoDB alias) for the first alias that was
            queried, or None when no alias was queried
        """
        for alias in raw_name.split(";"):
            alias = alias.strip()
            if not alias:
                continue
            if alias in self.genes:
                return alias, alias
            canonical = self._canonical.get(alias.lower())
            if canonical is not None:
                return canonical, alias
        return None

    def resolve_source_name(self, raw_name: str) -> Optional[str]:
        """Map a raw source name to its queried spelling."""
        match = self.match_source_alias(raw_name)
        return match[0] if match is not None else None

    def build(self, bindings: list[dict[str, Any]]) -> OrthologMapResult:
        """Build the ortholog map from SPARQL result bindings.

        Args:
            bindings: Rows with gene_s, gene_s_name, gene_t, gene_t_name

        Returns:
            OrthologMapResult with the map, the source registry and counts

        Notes:
            - A queried gene with no usable row is absent from the map
            - Target candidates are unique per key by case-insensitive name
            - The source registry keeps the first anchor seen per key, named
              with the OrthoDB spelling so it matches provider symbols
        """
        result = OrthologMapResult()

        for binding in bindings:
            result.rows_seen += 1

            raw_source = binding_value(binding, "gene_s_name")
            raw_target = binding_value(binding, "gene_t_name")
            if not raw_source or not raw_target:
                result.rows_dropped += 1
                continue

            # Rows spelled "MTOR" for a query "mtor" land on the "mtor" key
            match = self.match_source_alias(raw_source)
            if match is None:
                result.rows_dropped += 1
                continue
            key, source_name = match

            source_uri = binding_value(binding, "gene_s")
            if key not in result.source_registry:
                result.source_registry[key] = GeneRecord(
                    name=source_name,
                    orthodb_id=orthodb_id_from_uri(source_uri) if source_uri else None,
                )

            target_uri = binding_value(binding, "gene_t")
            target_name = choose_target_alias(raw_target)
            targets = result.ortholog_map.setdefault(key, [])
            if any(t.name.lower() == target_name.lower() for t in targets):
                continue
            targets.append(GeneRecord(
                name=target_name,
                orthodb_id=orthodb_id_from_uri(target_uri) if target_uri else None,
            ))

        # Key order follows the query, not row arrival
        result.ortholog_map = {
            g: result.ortholog_map[g] for g in self.genes if g in result.ortholog_map
        }

        logger.info(
            "ortholog_map_built",
            queried=len(self.genes),
            matched=len(result.ortholog_map),
            rows_seen=result.rows_seen,
            rows_dropped=result.rows_dropped,
            candidates=sum(len(v) for v in result.ortholog_map.values()),
        )

        return result
