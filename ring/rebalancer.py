import logging
from typing import Callable

from node.shard import Node
from ring.hash_ring import HashRing


class Rebalancer:
    """Moves the keys whose owner changed after a ring membership change.

    Both paths expect the caller to hold the ring exclusively for the whole call.
    """

    def __init__(self, ring: HashRing, hash_key: Callable[[str], int]) -> None:
        self._ring = ring
        self._hash_key = hash_key

    def on_add(self, node_id: int) -> int:
        """Pull the new node's range from its clockwise neighbour. Call after the node joined."""
        new_node = self._ring.node(node_id)
        succ = self._ring.node(self._ring.successor(new_node.position))
        if succ is new_node:
            return 0
        moved = 0
        for key in succ.keys():
            if self._ring.owner(self._hash_key(key)) == new_node.id:
                self._move(key, succ, new_node)
                moved += 1
        if moved:
            logging.info("Moved %d keys from node %d to new node %d", moved, succ.id, new_node.id)
        return moved

    def on_remove(self, node_id: int) -> int:
        """Hand every key of a leaving node to its clockwise neighbour. Call before it leaves."""
        node = self._ring.node(node_id)
        succ = self._ring.node(self._ring.successor(node.position))
        if succ is node:
            dropped = len(node)
            if dropped:
                logging.warning("Node %d is the last node, dropping %d keys", node.id, dropped)
            return 0
        moved = 0
        for key in node.keys():
            self._move(key, node, succ)
            moved += 1
        if moved:
            logging.info("Moved %d keys from removed node %d to node %d", moved, node.id, succ.id)
        return moved

    @staticmethod
    def _move(key: str, src: Node, dest: Node) -> None:
        value = src.pop(key)
        if value is None:
            return
        dest.put(key, value)
        logging.debug("Migrated %r: node %d -> node %d", key, src.id, dest.id)
