import itertools
import random
from bisect import bisect_right, insort
from typing import Callable, Dict, Iterable, List, Optional

from node.shard import Node
from ring.errors import EmptyRingError, NodeNotFoundError, PositionSourceExhaustedError, RingFullError
from ring.hashing import HashFunction

DEFAULT_RING_SIZE = 32

# (node_id, attempt) -> candidate position; the ring reduces it modulo its size.
PositionSource = Callable[[int, int], int]


class RandomPositions:
    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = random.Random(seed)

    def __call__(self, node_id: int, attempt: int) -> int:
        return self._random.getrandbits(64)


class HashedPositions:
    def __init__(self, hash_fn: HashFunction) -> None:
        self._hash_fn = hash_fn

    def __call__(self, node_id: int, attempt: int) -> int:
        return self._hash_fn(f"{node_id}:{attempt}")


class PresetPositions:
    """Hands out a fixed sequence of positions, one per draw, then defers to ``fallback``."""

    def __init__(self, positions: Iterable[int], fallback: Optional[PositionSource] = None) -> None:
        self._positions = iter(list(positions))
        self._fallback = fallback

    def __call__(self, node_id: int, attempt: int) -> int:
        position = next(self._positions, None)
        if position is not None:
            return position
        if self._fallback is None:
            raise PositionSourceExhaustedError()
        return self._fallback(node_id, attempt)


class HashRing:
    """Live nodes ordered by position.

    A hash ``h`` is owned by the first node whose position is strictly greater than ``h``,
    wrapping around to the lowest position.
    """

    def __init__(
        self,
        ring_size: int = DEFAULT_RING_SIZE,
        position_source: Optional[PositionSource] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        if ring_size <= 0:
            raise ValueError(f"ring size must be positive, got {ring_size}")
        self._ring_size = ring_size
        self._position_source = position_source or RandomPositions()
        self._max_attempts = max_attempts if max_attempts is not None else 4 * ring_size
        self._positions: List[int] = []
        self._by_position: Dict[int, Node] = {}
        self._by_id: Dict[int, Node] = {}
        self._ids = itertools.count()

    @property
    def ring_size(self) -> int:
        return self._ring_size

    def add_node(self) -> int:
        if len(self._positions) >= self._ring_size:
            raise RingFullError(self._ring_size)
        node_id = next(self._ids)
        position = self._allocate_position(node_id)
        node = Node(node_id, position)
        insort(self._positions, position)
        self._by_position[position] = node
        self._by_id[node_id] = node
        return node_id

    def _allocate_position(self, node_id: int) -> int:
        candidate = 0
        for attempt in range(self._max_attempts):
            candidate = self._position_source(node_id, attempt) % self._ring_size
            if candidate not in self._by_position:
                return candidate
        # Out of draws: take the first free slot clockwise from the last candidate.
        for offset in range(1, self._ring_size + 1):
            position = (candidate + offset) % self._ring_size
            if position not in self._by_position:
                return position
        raise RingFullError(self._ring_size)

    def remove_node(self, node_id: int) -> None:
        node = self._by_id.pop(node_id, None)
        if node is None:
            raise NodeNotFoundError(node_id)
        del self._by_position[node.position]
        idx = bisect_right(self._positions, node.position) - 1
        del self._positions[idx]

    def owner(self, hash_value: int) -> int:
        return self.owner_node(hash_value).id

    def owner_node(self, hash_value: int) -> Node:
        if not self._positions:
            raise EmptyRingError()
        if not 0 <= hash_value < self._ring_size:
            raise ValueError(f"hash {hash_value} outside ring space [0, {self._ring_size})")
        idx = bisect_right(self._positions, hash_value)
        if idx == len(self._positions):
            idx = 0
        return self._by_position[self._positions[idx]]

    def successor(self, position: int) -> int:
        return self.owner(position)

    def node(self, node_id: int) -> Node:
        try:
            return self._by_id[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def nodes(self) -> List[Node]:
        return [self._by_position[p] for p in self._positions]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __len__(self) -> int:
        return len(self._positions)
