from __future__ import annotations

from dependency_injector import containers, providers

from core.settings import SETTINGS
from infra.rate_limiter import RateLimiter
from infra.resources import DatabaseResource, RedisResource


class InfrastructureContainer(containers.DeclarativeContainer):
    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=str(SETTINGS.DATABASE.DATABASE_URL),
    )

    # Redis (rate limit counters)
    redis_db = providers.Resource(
        RedisResource,
        redis_url=str(SETTINGS.REDIS.REDIS_URL),
    )

    rate_limiter = providers.Factory(
        RateLimiter,
        redis=redis_db,
        window_seconds=SETTINGS.RATE_LIMIT.RATE_LIMIT_WINDOW_SECONDS,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    # Outbound webhook
    generation_client = providers.Singleton(
        "api.features.content.client.GenerationClient",
        webhook_url=SETTINGS.WEBHOOK.WEBHOOK_URL,
        timeout=SETTINGS.WEBHOOK.WEBHOOK_TIMEOUT_SECONDS,
    )

    # Services
    auth_service = providers.Factory(
        "api.features.auth.service.AuthService",
        secret_key=SETTINGS.AUTH.JWT_SECRET_KEY.get_secret_value(),
        algorithm=SETTINGS.AUTH.JWT_ALGORITHM,
        token_ttl_minutes=SETTINGS.AUTH.ACCESS_TOKEN_EXPIRE_MINUTES,
        bcrypt_rounds=SETTINGS.AUTH.BCRYPT_ROUNDS,
    )

    conversation_service = providers.Factory(
        "api.features.conversation.service.ConversationService",
        generation_client=generation_client,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

    # Controllers
    auth_controller = providers.Factory(
        "api.features.auth.controller.AuthController",
        auth_service=services.auth_service,
    )

    content_controller = providers.Factory(
        "api.features.content.controller.ContentController",
        generation_client=services.generation_client,
    )

    conversation_controller = providers.Factory(
        "api.features.conversation.controller.ConversationController",
        conversation_service=services.conversation_service,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.main",
            "api.shared.db",
            "api.shared.rate_limit",
            "api.features.auth.dependencies",
            "api.features.auth.router",
            "api.features.content.router",
            "api.features.conversation.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
