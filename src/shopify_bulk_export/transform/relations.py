from __future__ import annotations

from typing import Dict, List, Optional

from shopify_bulk_export.core.models import PARENT_ID_FIELD, ResultRecord
from shopify_bulk_export.utils.logging import get_logger

log = get_logger("shopify_bulk_export.relations")


def parent_id(record: ResultRecord) -> Optional[str]:
    """The id of the record this one was nested under, if any."""
    value = record.get(PARENT_ID_FIELD)
    return str(value) if value else None


def group_by_parent(records: List[ResultRecord]) -> Dict[Optional[str], List[ResultRecord]]:
    """
    Bucket records by parent id, preserving file order within each bucket.

    Top-level records land under the ``None`` key.
    """
    groups: Dict[Optional[str], List[ResultRecord]] = {}
    for record in records:
        groups.setdefault(parent_id(record), []).append(record)
    return groups


def attach_children(records: List[ResultRecord], key: str = "children") -> List[ResultRecord]:
    """
    Rebuild nesting from a flattened bulk result.

    Returns copies of the top-level records, each with its children listed
    under ``key`` (recursively). Children whose parent is not in the file
    are dropped with a warning.
    """
    nodes: Dict[str, ResultRecord] = {}
    ordered: List[ResultRecord] = []
    for record in records:
        node = dict(record)
        node[key] = []
        ordered.append(node)
        if node.get("id"):
            nodes[str(node["id"])] = node

    roots: List[ResultRecord] = []
    orphans = 0
    for node in ordered:
        pid = parent_id(node)
        if pid is None:
            roots.append(node)
        elif pid in nodes:
            nodes[pid][key].append(node)
        else:
            orphans += 1

    if orphans:
        log.warning("Dropped %d records whose parent is not in the result set", orphans)

    return roots
