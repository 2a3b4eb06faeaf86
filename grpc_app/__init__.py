"""gRPC transport layer for the task provider.

This package hosts:
- The protocol definition (in `protos/`), compiled at import time by `generated/`.
- Server bootstrap and interceptors.
- Entity mappers between protobuf messages and domain entities.
- The streaming emitter used by list-returning RPCs.
- The `Provider` servicer that maps requests to application services.
"""
