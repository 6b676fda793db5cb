class PartitionerError(Exception):
    pass


class EmptyRingError(PartitionerError):
    def __init__(self) -> None:
        super().__init__("ring has no nodes")


class NodeNotFoundError(PartitionerError):
    def __init__(self, node_id: int) -> None:
        super().__init__(f"node {node_id} not found")
        self.node_id = node_id


class RingFullError(PartitionerError):
    def __init__(self, ring_size: int) -> None:
        super().__init__(f"no free position left in ring of size {ring_size}")
        self.ring_size = ring_size


class PositionSourceExhaustedError(PartitionerError):
    def __init__(self) -> None:
        super().__init__("position source has no positions left")
