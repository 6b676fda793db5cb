import threading
from typing import Dict, List, Optional


class Node:
    """One shard of the ring: a fixed position plus an in-memory key-value map."""

    def __init__(self, node_id: int, position: int) -> None:
        self._id = node_id
        self._position = position
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def id(self) -> int:
        return self._id

    @property
    def position(self) -> int:
        return self._position

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def pop(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.pop(key, None)

    def keys(self) -> List[str]:
        # Copy so callers can move keys out while iterating.
        with self._lock:
            return list(self._data.keys())

    def describe(self) -> Dict[str, object]:
        with self._lock:
            return {"id": self._id, "position": self._position, "keys": dict(self._data)}

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"Node(id={self._id}, position={self._position}, keys={len(self)})"
