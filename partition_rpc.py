"""Message and service modules for ``protos/partition.proto``.

The modules are compiled from the .proto at import time by grpcio-tools. Running
``python -m grpc_tools.protoc -I. --python_out=. --grpc_python_out=. protos/partition.proto``
writes the same modules to disk, and they are then imported from there instead.
"""
import sys
from pathlib import Path

import grpc

# Ensure the directory holding protos/ is on the proto search path
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

pb, pbg = grpc.protos_and_services("protos/partition.proto")
