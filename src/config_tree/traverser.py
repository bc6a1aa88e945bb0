"""Depth-first traversal of configuration trees with filter callbacks.

This module provides the single-tree walk used for hash calculation and
cleanup, and the synchronized dual-tree walk that drives the optimistic lock
merge. Filters receive callbacks on node entry/exit and, for the dual walk,
on property and list-element entry/exit.
"""

from typing import Any, Dict, Iterator, List, Tuple

from .nodes import UUID_KEY, is_node


class NodeFilter:
    """Callbacks for a single-tree walk. Override what you need."""

    def before_node(self, node: Dict[str, Any]) -> None:
        pass

    def after_node(self, node: Dict[str, Any]) -> None:
        pass


class DualNodeFilter:
    """Callbacks for a synchronized walk of two same-shaped trees.

    The first node of every pair comes from the first tree passed to
    dual_traverse_nodes(), the second node from the second tree. Indices of
    list elements are reported for both lists since paired elements do not
    have to sit at the same position.
    """

    def before_node(self, node1: Dict[str, Any], node2: Dict[str, Any]) -> None:
        pass

    def after_node(self, node1: Dict[str, Any], node2: Dict[str, Any]) -> None:
        pass

    def before_node_property(self, key: str) -> None:
        pass

    def after_node_property(self, key: str) -> None:
        pass

    def before_list_element(self, index1: int, index2: int) -> None:
        pass

    def after_list_element(self, index1: int, index2: int) -> None:
        pass


def traverse_node(node: Dict[str, Any], node_filter: NodeFilter) -> None:
    """Walk every node of a tree depth-first, parents before children.

    Nodes nested inside lists are visited as well. before_node() runs before
    the children are read, so a filter may modify the node it is given.

    Args:
        node: Root of the tree
        node_filter: Filter receiving the callbacks
    """
    node_filter.before_node(node)

    for value in list(node.values()):
        if is_node(value):
            traverse_node(value, node_filter)
        elif isinstance(value, list):
            for element in value:
                if is_node(element):
                    traverse_node(element, node_filter)

    node_filter.after_node(node)


def _has_unique_uuids(nodes: List[Tuple[int, Dict[str, Any]]], uuid_key: str) -> bool:
    if not nodes or not all(uuid_key in e for _, e in nodes):
        return False
    uuids = [e[uuid_key] for _, e in nodes]
    # unhashable or repeated identities cannot pair elements one to one
    if not all(isinstance(u, (str, int)) for u in uuids):
        return False
    return len(set(uuids)) == len(uuids)


def _match_list_elements(
    list1: List[Any],
    list2: List[Any],
    uuid_key: str,
) -> Iterator[Tuple[int, int]]:
    """Pair up node elements of two lists.

    When every node element on both sides carries a uuid_key that is unique
    within its list, elements are paired by that identity (in the order of
    list1). Otherwise elements are paired by position. Scalars and unpaired
    elements are skipped.
    """
    nodes1 = [(i, e) for i, e in enumerate(list1) if is_node(e)]
    nodes2 = [(i, e) for i, e in enumerate(list2) if is_node(e)]

    if _has_unique_uuids(nodes1, uuid_key) and _has_unique_uuids(nodes2, uuid_key):
        index2_by_uuid = {e[uuid_key]: i for i, e in nodes2}
        for index1, element1 in nodes1:
            index2 = index2_by_uuid.get(element1[uuid_key])
            if index2 is not None:
                yield index1, index2
        return

    for index in range(min(len(list1), len(list2))):
        if is_node(list1[index]) and is_node(list2[index]):
            yield index, index


def dual_traverse_nodes(
    node1: Dict[str, Any],
    node2: Dict[str, Any],
    node_filter: DualNodeFilter,
    uuid_key: str = UUID_KEY,
) -> None:
    """Walk two trees in lock-step, depth-first.

    The walk descends into every key present in both nodes whose values are
    both nodes or both lists. Keys present on one side only are not visited.
    before_node() runs before the children are read, so contents exchanged by
    the filter are what the walk continues with. An exception raised by the
    filter stops the walk immediately.

    Args:
        node1: Root of the first tree
        node2: Root of the second tree
        node_filter: Filter receiving the callbacks
        uuid_key: Key used to pair list elements by identity
    """
    node_filter.before_node(node1, node2)

    for key in list(node1.keys()):
        if key not in node2:
            continue

        value1 = node1[key]
        value2 = node2[key]

        if is_node(value1) and is_node(value2):
            node_filter.before_node_property(key)
            dual_traverse_nodes(value1, value2, node_filter, uuid_key)
            node_filter.after_node_property(key)

        elif isinstance(value1, list) and isinstance(value2, list):
            node_filter.before_node_property(key)
            pairs = list(_match_list_elements(value1, value2, uuid_key))
            for index1, index2 in pairs:
                node_filter.before_list_element(index1, index2)
                dual_traverse_nodes(value1[index1], value2[index2], node_filter, uuid_key)
                node_filter.after_list_element(index1, index2)
            node_filter.after_node_property(key)

    node_filter.after_node(node1, node2)
