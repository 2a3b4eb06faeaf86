"""Protocol buffer modules for ``taskprovider.v1``.

Compiled at import time from ``grpc_app/protos`` by grpcio-tools
(``grpc.protos_and_services``), so no generated sources are checked in.
Import as::

    from grpc_app.generated import provider_pb2, provider_pb2_grpc
"""
from __future__ import annotations

import sys
from pathlib import Path

import grpc


PROTO_ROOT = Path(__file__).resolve().parent.parent / "protos"
PROVIDER_PROTO = "taskprovider/v1/provider.proto"

# protoc resolves proto paths (and their imports) against sys.path entries
if str(PROTO_ROOT) not in sys.path:
    sys.path.append(str(PROTO_ROOT))

provider_pb2, provider_pb2_grpc = grpc.protos_and_services(PROVIDER_PROTO)

SERVICE_NAME = "taskprovider.v1.Provider"

__all__ = ["provider_pb2", "provider_pb2_grpc", "SERVICE_NAME", "PROTO_ROOT"]
