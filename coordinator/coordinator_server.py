import argparse
import logging
import sys
import time
from concurrent import futures
from pathlib import Path
from typing import List, Optional, Tuple

# Ensure project root is importable when run as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import grpc
from google.protobuf.message import DecodeError

from partition_rpc import pb, pbg
from ring.errors import EmptyRingError, NodeNotFoundError, PositionSourceExhaustedError, RingFullError
from ring.hash_ring import DEFAULT_RING_SIZE, PositionSource, PresetPositions, RandomPositions
from ring.hashing import DEFAULT_HASH, HASH_FUNCTIONS, get_hash_function
from ring.partitioner import Partitioner

DEFAULT_BIND = "0.0.0.0:50060"


class Coordinator(pbg.PartitionerServicer):
    def __init__(self, partitioner: Partitioner) -> None:
        self._partitioner = partitioner

    @staticmethod
    def _require(request, context, *fields: str) -> None:
        for name in fields:
            if not request.HasField(name):
                context.abort(grpc.StatusCode.INVALID_ARGUMENT, f"'{name}' is required")

    def Insert(self, request: pb.InsertRequest, context) -> pb.InsertReply:
        self._require(request, context, "key", "value")
        try:
            node_id = self._partitioner.insert(request.key, request.value)
        except EmptyRingError as e:
            context.abort(grpc.StatusCode.FAILED_PRECONDITION, str(e))
        return pb.InsertReply(node_id=node_id)

    def Get(self, request: pb.KeyRequest, context) -> pb.GetReply:
        self._require(request, context, "key")
        try:
            node_id, value = self._partitioner.lookup(request.key)
        except EmptyRingError as e:
            context.abort(grpc.StatusCode.FAILED_PRECONDITION, str(e))
        reply = pb.GetReply(found=value is not None, node_id=node_id)
        if value is not None:
            reply.value = value
        return reply

    def Delete(self, request: pb.KeyRequest, context) -> pb.DeleteReply:
        self._require(request, context, "key")
        try:
            deleted = self._partitioner.delete(request.key)
        except EmptyRingError as e:
            context.abort(grpc.StatusCode.FAILED_PRECONDITION, str(e))
        return pb.DeleteReply(deleted=deleted)

    def AddNode(self, request: pb.Empty, context) -> pb.AddNodeReply:
        try:
            stats = self._partitioner.add_node_with_stats()
        except RingFullError as e:
            context.abort(grpc.StatusCode.RESOURCE_EXHAUSTED, str(e))
        except PositionSourceExhaustedError as e:
            context.abort(grpc.StatusCode.FAILED_PRECONDITION, str(e))
        return pb.AddNodeReply(**stats)

    def RemoveNode(self, request: pb.RemoveNodeRequest, context) -> pb.RemoveNodeReply:
        self._require(request, context, "node_id")
        try:
            moved = self._partitioner.remove_node(request.node_id)
        except NodeNotFoundError as e:
            context.abort(grpc.StatusCode.NOT_FOUND, str(e))
        return pb.RemoveNodeReply(moved=moved)

    def DescribeRing(self, request: pb.Empty, context) -> pb.RingLayout:
        nodes = [
            pb.NodeInfo(id=node["id"], position=node["position"], keys=node["keys"])
            for node in self._partitioner.describe()
        ]
        return pb.RingLayout(ring_size=self._partitioner.ring_size, nodes=nodes)


class DecodeErrorInterceptor(grpc.ServerInterceptor):
    """Rejects unary requests whose payload does not parse with INVALID_ARGUMENT."""

    def intercept_service(self, continuation, handler_call_details):
        handler = continuation(handler_call_details)
        if handler is None or handler.unary_unary is None or handler.request_deserializer is None:
            return handler
        deserialize = handler.request_deserializer
        behavior = handler.unary_unary

        def checked(request_bytes: bytes, context):
            try:
                request = deserialize(request_bytes)
            except DecodeError as e:
                context.abort(grpc.StatusCode.INVALID_ARGUMENT, f"malformed request: {e}")
            return behavior(request, context)

        # No deserializer: grpc hands the raw bytes to the behavior.
        return grpc.unary_unary_rpc_method_handler(checked, response_serializer=handler.response_serializer)


def parse_positions(text: str) -> List[int]:
    try:
        return [int(p) for p in text.split(",") if p.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid position list: {text!r}") from None


def build_server(partitioner: Partitioner, bind: str, max_workers: int = 16) -> Tuple[grpc.Server, int]:
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=max_workers), interceptors=(DecodeErrorInterceptor(),))
    pbg.add_PartitionerServicer_to_server(Coordinator(partitioner), server)
    port = server.add_insecure_port(bind)
    return server, port


def serve(
    bind: str,
    ring_size: int,
    nodes: int,
    hash_name: str,
    seed: Optional[int] = None,
    positions: Optional[List[int]] = None,
) -> None:
    source: PositionSource = RandomPositions(seed)
    if positions:
        source = PresetPositions(positions, fallback=source)
    partitioner = Partitioner(
        ring_size=ring_size,
        hash_fn=get_hash_function(hash_name),
        position_source=source,
        initial_nodes=nodes,
    )
    server, _ = build_server(partitioner, bind)
    server.start()
    logging.info("Coordinator listening on %s (ring_size=%d, nodes=%d, hash=%s)", bind, ring_size, nodes, hash_name)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        server.stop(0)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--bind", default=DEFAULT_BIND)
    parser.add_argument("--ring-size", type=int, default=DEFAULT_RING_SIZE)
    parser.add_argument("--nodes", type=int, default=4, help="nodes to create at startup")
    parser.add_argument("--hash", default=DEFAULT_HASH, choices=sorted(HASH_FUNCTIONS))
    parser.add_argument("--seed", type=int, default=None, help="seed for random node positions")
    parser.add_argument("--positions", type=parse_positions, default=None, help="comma-separated node positions")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="[coordinator] %(asctime)s %(levelname)s %(message)s")
    serve(args.bind, args.ring_size, args.nodes, args.hash, seed=args.seed, positions=args.positions)


if __name__ == "__main__":
    main()
