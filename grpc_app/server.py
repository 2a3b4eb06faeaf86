from __future__ import annotations

from typing import Optional, Sequence
import grpc
from grpc_health.v1 import health, health_pb2_grpc, health_pb2

from core.config import GrpcTlsSettings, settings
from core.logging_config import get_logger
from grpc_app.generated import SERVICE_NAME, provider_pb2_grpc
from grpc_app.interceptors.request_id import RequestIdInterceptor
from grpc_app.interceptors.logging import LoggingInterceptor
from grpc_app.interceptors.exceptions import ExceptionMappingInterceptor
from grpc_app.services.provider_service import ProviderService


logger = get_logger(__name__)


def build_interceptors() -> Sequence[grpc.aio.ServerInterceptor]:
    return (
        RequestIdInterceptor(),
        LoggingInterceptor(),
        ExceptionMappingInterceptor(),  # maps escaped exceptions to a status
    )


def _read(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _server_credentials(tls: GrpcTlsSettings) -> grpc.ServerCredentials:
    if not (tls.cert and tls.key):
        raise RuntimeError("GRPC TLS enabled but cert/key not provided")
    # A CA bundle switches on mutual TLS
    root_certificates = _read(tls.ca) if tls.ca else None
    return grpc.ssl_server_credentials(
        [(_read(tls.key), _read(tls.cert))],
        root_certificates=root_certificates,
        require_client_auth=root_certificates is not None,
    )


async def create_server(
    servicer: Optional[ProviderService] = None,
    *,
    address: Optional[str] = None,
) -> grpc.aio.Server:
    """Build (but do not start) the gRPC server; ``address`` defaults to GRPC__HOST:GRPC__PORT."""
    options = [
        ("grpc.max_concurrent_streams", max(1, settings.grpc.max_concurrent_streams)),
    ]
    server = grpc.aio.server(interceptors=build_interceptors(), options=options)

    provider_pb2_grpc.add_ProviderServicer_to_server(servicer or ProviderService(), server)

    # Health service (asyncio flavor: every handler behind the interceptors is awaited)
    health_svc = health.aio.HealthServicer()
    health_pb2_grpc.add_HealthServicer_to_server(health_svc, server)
    await health_svc.set("", health_pb2.HealthCheckResponse.SERVING)
    await health_svc.set(SERVICE_NAME, health_pb2.HealthCheckResponse.SERVING)

    address = address or f"{settings.grpc.host}:{settings.grpc.port}"
    if settings.grpc.tls.enabled:
        server.add_secure_port(address, _server_credentials(settings.grpc.tls))
    else:
        server.add_insecure_port(address)
    logger.debug("grpc_server_built", address=address, tls=settings.grpc.tls.enabled)
    return server
