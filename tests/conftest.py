from typing import Dict

import pytest

from ring.hash_ring import PresetPositions
from ring.partitioner import Partitioner


class StubHash:
    """Maps known keys to fixed hashes; unknown keys fall back to their length."""

    def __init__(self, table: Dict[str, int]) -> None:
        self.table = table

    def __call__(self, key: str) -> int:
        return self.table.get(key, len(key))


@pytest.fixture
def stub_hash() -> StubHash:
    return StubHash({"cat": 7, "bird": 11, "owl": 12, "fish": 15, "wolf": 29, "yak": 30, "ant": 3})


@pytest.fixture
def example_partitioner(stub_hash: StubHash) -> Partitioner:
    # Ring of 32 with nodes 0..3 at positions 5, 12, 20, 29; the next node lands at 9.
    return Partitioner(
        ring_size=32,
        hash_fn=stub_hash,
        position_source=PresetPositions([5, 12, 20, 29, 9]),
        initial_nodes=4,
    )
