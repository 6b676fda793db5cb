from node.shard import Node


def test_put_get_overwrite_delete():
    node = Node(3, 17)
    assert node.id == 3
    assert node.position == 17
    assert node.get("k") is None

    node.put("k", "v1")
    node.put("k", "v2")
    assert node.get("k") == "v2"
    assert len(node) == 1
    assert "k" in node

    node.delete("k")
    node.delete("k")
    assert node.get("k") is None
    assert len(node) == 0


def test_keys_is_a_snapshot():
    node = Node(0, 0)
    for i in range(5):
        node.put(f"k{i}", str(i))
    keys = node.keys()
    for key in keys:
        node.pop(key)
    assert sorted(keys) == [f"k{i}" for i in range(5)]
    assert node.keys() == []


def test_pop_and_describe():
    node = Node(1, 4)
    node.put("a", "1")
    assert node.describe() == {"id": 1, "position": 4, "keys": {"a": "1"}}
    assert node.pop("a") == "1"
    assert node.pop("a") is None
