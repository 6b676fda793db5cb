import pytest

from ring.errors import EmptyRingError, NodeNotFoundError, PositionSourceExhaustedError, RingFullError
from ring.hash_ring import HashedPositions, HashRing, PresetPositions, RandomPositions
from ring.hashing import sha256_hash


def make_ring(positions, ring_size=32, **kwargs) -> HashRing:
    ring = HashRing(ring_size, position_source=PresetPositions(positions), **kwargs)
    for _ in positions:
        ring.add_node()
    return ring


def test_nodes_sorted_by_position():
    ring = make_ring([20, 5, 29, 12])
    assert [n.position for n in ring.nodes()] == [5, 12, 20, 29]
    assert [n.id for n in ring.nodes()] == [1, 3, 0, 2]
    assert len(ring) == 4


def test_owner_strictly_greater_with_wraparound():
    ring = make_ring([5, 12, 20, 29])
    assert ring.owner(7) == 1
    assert ring.owner(0) == 0
    # a hash landing on a node's position belongs to the next node
    assert ring.owner(12) == 2
    assert ring.owner(28) == 3
    assert ring.owner(29) == 0
    assert ring.owner(31) == 0


def test_owner_is_stable():
    ring = make_ring([5, 12, 20, 29])
    assert {ring.owner(15) for _ in range(10)} == {2}


def test_successor():
    ring = make_ring([5, 12, 20, 29])
    assert ring.successor(12) == 2
    assert ring.successor(29) == 0
    lone = make_ring([8])
    assert lone.successor(8) == 0


def test_empty_ring_and_range_errors():
    ring = HashRing(32)
    with pytest.raises(EmptyRingError):
        ring.owner(3)
    ring.add_node()
    with pytest.raises(ValueError):
        ring.owner(32)
    with pytest.raises(ValueError):
        ring.owner(-1)
    with pytest.raises(ValueError):
        HashRing(0)


def test_remove_node_frees_position_and_never_reuses_ids():
    ring = make_ring([5, 12])
    ring.remove_node(0)
    assert 0 not in ring
    assert [n.position for n in ring.nodes()] == [12]
    with pytest.raises(NodeNotFoundError):
        ring.remove_node(0)
    with pytest.raises(NodeNotFoundError):
        ring.node(0)

    ring2 = HashRing(32, position_source=PresetPositions([5, 12, 5]))
    ring2.add_node()
    ring2.add_node()
    ring2.remove_node(0)
    assert ring2.add_node() == 2
    assert ring2.node(2).position == 5


def test_collision_is_retried():
    ring = HashRing(32, position_source=PresetPositions([5, 5, 7]))
    ring.add_node()
    ring.add_node()
    assert [n.position for n in ring.nodes()] == [5, 7]


def test_exhausted_draws_take_next_free_slot():
    ring = HashRing(8, position_source=lambda node_id, attempt: 3, max_attempts=5)
    ring.add_node()
    ring.add_node()
    ring.add_node()
    assert [n.position for n in ring.nodes()] == [3, 4, 5]


def test_ring_full():
    ring = HashRing(4, position_source=RandomPositions(seed=1))
    for _ in range(4):
        ring.add_node()
    assert sorted(n.position for n in ring.nodes()) == [0, 1, 2, 3]
    with pytest.raises(RingFullError):
        ring.add_node()


def test_preset_source_runs_dry():
    ring = HashRing(32, position_source=PresetPositions([1]))
    ring.add_node()
    with pytest.raises(PositionSourceExhaustedError):
        ring.add_node()
    # free slots remain, so this is not a full ring
    assert len(ring) == 1


def test_preset_source_fallback():
    ring = HashRing(32, position_source=PresetPositions([1], fallback=lambda node_id, attempt: 9))
    ring.add_node()
    ring.add_node()
    assert [n.position for n in ring.nodes()] == [1, 9]


def test_seeded_and_hashed_sources_are_reproducible():
    def layout(source):
        ring = HashRing(1024, position_source=source)
        for _ in range(8):
            ring.add_node()
        return [(n.id, n.position) for n in ring.nodes()]

    assert layout(RandomPositions(seed=42)) == layout(RandomPositions(seed=42))
    assert layout(HashedPositions(sha256_hash)) == layout(HashedPositions(sha256_hash))
    assert HashedPositions(sha256_hash)(3, 0) == sha256_hash("3:0")
