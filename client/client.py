import argparse
import sys
from pathlib import Path

# Ensure project root is importable when run as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import grpc

from partition_rpc import pb, pbg

DEFAULT_SERVER = "127.0.0.1:50060"


def insert(server: str, key: str, value: str) -> pb.InsertReply:
    with grpc.insecure_channel(server) as ch:
        return pbg.PartitionerStub(ch).Insert(pb.InsertRequest(key=key, value=value))


def get(server: str, key: str) -> pb.GetReply:
    with grpc.insecure_channel(server) as ch:
        return pbg.PartitionerStub(ch).Get(pb.KeyRequest(key=key))


def delete(server: str, key: str) -> pb.DeleteReply:
    with grpc.insecure_channel(server) as ch:
        return pbg.PartitionerStub(ch).Delete(pb.KeyRequest(key=key))


def add_node(server: str) -> pb.AddNodeReply:
    with grpc.insecure_channel(server) as ch:
        return pbg.PartitionerStub(ch).AddNode(pb.Empty())


def remove_node(server: str, node_id: int) -> pb.RemoveNodeReply:
    with grpc.insecure_channel(server) as ch:
        return pbg.PartitionerStub(ch).RemoveNode(pb.RemoveNodeRequest(node_id=node_id))


def describe(server: str) -> pb.RingLayout:
    with grpc.insecure_channel(server) as ch:
        return pbg.PartitionerStub(ch).DescribeRing(pb.Empty())


def print_ring(ring: pb.RingLayout) -> None:
    print(f"Ring size {ring.ring_size}, {len(ring.nodes)} nodes")
    for node in ring.nodes:
        print(f"[Node: {node.id}, Position: {node.position}, Data: {dict(node.keys)}]")


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--server", default=DEFAULT_SERVER)
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_insert = sub.add_parser("insert")
    p_insert.add_argument("key")
    p_insert.add_argument("value")

    p_get = sub.add_parser("get")
    p_get.add_argument("key")

    p_delete = sub.add_parser("delete")
    p_delete.add_argument("key")

    sub.add_parser("add-node")

    p_remove = sub.add_parser("remove-node")
    p_remove.add_argument("node_id", type=int)

    sub.add_parser("describe")

    args = parser.parse_args()
    try:
        if args.cmd == "insert":
            resp = insert(args.server, args.key, args.value)
            print(f"stored on node {resp.node_id}")
        elif args.cmd == "get":
            resp = get(args.server, args.key)
            if not resp.found:
                print(f"key {args.key!r} not found (owner node {resp.node_id})")
                return 1
            print(resp.value)
        elif args.cmd == "delete":
            resp = delete(args.server, args.key)
            print("deleted" if resp.deleted else "not found")
        elif args.cmd == "add-node":
            resp = add_node(args.server)
            print(f"added node {resp.node_id} at position {resp.position} ({resp.moved} keys moved)")
        elif args.cmd == "remove-node":
            resp = remove_node(args.server, args.node_id)
            print(f"removed node {args.node_id} ({resp.moved} keys moved)")
        elif args.cmd == "describe":
            print_ring(describe(args.server))
    except grpc.RpcError as e:
        print(f"error: {e.code().name}: {e.details()}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
