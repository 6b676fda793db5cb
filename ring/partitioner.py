import logging
from typing import Dict, List, Optional, Tuple

from node.shard import Node
from ring.errors import NodeNotFoundError
from ring.hash_ring import DEFAULT_RING_SIZE, HashRing, PositionSource
from ring.hashing import HashFunction, sha256_hash
from ring.locking import ReadWriteLock
from ring.rebalancer import Rebalancer


class Partitioner:
    """Routes keys to nodes on a hash ring and rebalances on membership changes.

    Lookups and writes run under the shared side of a read-write lock. Adding or
    removing a node holds the exclusive side across the ring change and the key
    migration, so no reader sees a key on two nodes or on none.
    """

    def __init__(
        self,
        ring_size: int = DEFAULT_RING_SIZE,
        hash_fn: HashFunction = sha256_hash,
        position_source: Optional[PositionSource] = None,
        initial_nodes: int = 0,
        max_attempts: Optional[int] = None,
    ) -> None:
        self._hash_fn = hash_fn
        self._ring = HashRing(ring_size, position_source=position_source, max_attempts=max_attempts)
        self._rebalancer = Rebalancer(self._ring, self.hash_key)
        self._lock = ReadWriteLock()
        for _ in range(initial_nodes):
            self.add_node()

    @property
    def ring_size(self) -> int:
        return self._ring.ring_size

    def hash_key(self, key: str) -> int:
        return self._hash_fn(key) % self._ring.ring_size

    def _owner(self, key: str) -> Node:
        return self._ring.owner_node(self.hash_key(key))

    def insert(self, key: str, value: str) -> int:
        with self._lock.read():
            node = self._owner(key)
            node.put(key, value)
            return node.id

    def get(self, key: str) -> Optional[str]:
        with self._lock.read():
            return self._owner(key).get(key)

    def lookup(self, key: str) -> Tuple[int, Optional[str]]:
        with self._lock.read():
            node = self._owner(key)
            return node.id, node.get(key)

    def delete(self, key: str) -> bool:
        with self._lock.read():
            return self._owner(key).pop(key) is not None

    def owner_of(self, key: str) -> int:
        with self._lock.read():
            return self._owner(key).id

    def add_node(self) -> int:
        return self.add_node_with_stats()["node_id"]

    def add_node_with_stats(self) -> Dict[str, int]:
        with self._lock.write():
            node_id = self._ring.add_node()
            position = self._ring.node(node_id).position
            logging.info("Added node %d at position %d", node_id, position)
            moved = self._rebalancer.on_add(node_id)
            return {"node_id": node_id, "position": position, "moved": moved}

    def remove_node(self, node_id: int) -> int:
        with self._lock.write():
            if node_id not in self._ring:
                raise NodeNotFoundError(node_id)
            moved = self._rebalancer.on_remove(node_id)
            self._ring.remove_node(node_id)
            logging.info("Removed node %d", node_id)
            return moved

    def node_ids(self) -> List[int]:
        with self._lock.read():
            return [node.id for node in self._ring.nodes()]

    def describe(self) -> List[Dict[str, object]]:
        with self._lock.read():
            return [node.describe() for node in self._ring.nodes()]

    def key_count(self) -> int:
        with self._lock.read():
            return sum(len(node) for node in self._ring.nodes())

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._ring)
