"""Dependency injection container for services."""

from dependency_injector import containers, providers

from eventstream.config import Settings
from eventstream.services.closed_registry import ClosedConnectionRegistry
from eventstream.services.session_service import SessionService


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration providers
    config = providers.Dependency(instance_of=Settings)

    # Closed-connection registry - one per app, shared by all sessions
    closed_connection_registry = providers.Singleton(ClosedConnectionRegistry)

    # Session service - builds sessions with the configured retry and buffering
    session_service = providers.Singleton(
        SessionService,
        registry=closed_connection_registry,
        retry_milliseconds=config.provided.sse_retry_milliseconds,
        high_water_mark=config.provided.sse_high_water_mark,
        heartbeat_seconds=config.provided.sse_heartbeat_seconds,
    )
