"""Template context derivation.

Projects a ``ProjectConfig`` onto the flat ``TemplateContext`` consumed by
the inclusion filter and the Jinja2 renderer.  Each enum field becomes one
boolean per variant plus, where templates need the literal value, a nullable
string carrying the selected variant.
"""

from __future__ import annotations

from tbk_scaffold.models import (
    AuthType,
    CacheProvider,
    EmailProvider,
    AgentId,
    ModuleId,
    ObservabilityLevel,
    PackageManager,
    PresetType,
    ProjectConfig,
    SessionDriver,
    StorageProvider,
    TemplateContext,
)
from tbk_scaffold.utils import to_camel_case, to_kebab_case, to_pascal_case


def create_context(config: ProjectConfig) -> TemplateContext:
    """Derive the template context for *config*."""
    auth_sessions = config.auth == AuthType.JWT_SESSIONS
    session_driver = None
    if auth_sessions:
        session_driver = (config.session_driver or SessionDriver.MONGO).value

    has_storage = config.storage != StorageProvider.NONE
    has_email = config.email != EmailProvider.NONE

    return TemplateContext(
        project_name=config.project_name,
        project_name_kebab=to_kebab_case(config.project_name),
        project_name_pascal=to_pascal_case(config.project_name),
        project_name_camel=to_camel_case(config.project_name),
        # Auth
        auth=config.auth != AuthType.NONE,
        auth_jwt=config.auth in (AuthType.JWT, AuthType.JWT_SESSIONS),
        auth_sessions=auth_sessions,
        auth_google_oauth=config.auth != AuthType.NONE and config.google_oauth,
        session_driver=session_driver,
        # Cache
        cache=config.cache != CacheProvider.NONE,
        cache_memory=config.cache == CacheProvider.MEMORY,
        cache_redis=config.cache == CacheProvider.REDIS,
        # Queues
        queues=config.queues,
        queue_dashboard=config.queue_dashboard and config.queues,
        # Storage
        storage=has_storage,
        storage_local=config.storage == StorageProvider.LOCAL,
        storage_s3=config.storage == StorageProvider.S3,
        storage_r2=config.storage == StorageProvider.R2,
        storage_provider=config.storage.value if has_storage else None,
        # Email
        email=has_email,
        email_resend=config.email == EmailProvider.RESEND,
        email_mailgun=config.email == EmailProvider.MAILGUN,
        email_smtp=config.email == EmailProvider.SMTP,
        email_provider=config.email.value if has_email else None,
        realtime=config.realtime,
        admin=config.admin,
        # Observability
        observability_basic=config.observability == ObservabilityLevel.BASIC,
        observability_full=config.observability == ObservabilityLevel.FULL,
        # Security plugin ships with everything but the minimal preset
        security=config.preset != PresetType.MINIMAL,
        # Modules
        module_upload=ModuleId.UPLOAD in config.modules,
        module_healthcheck=ModuleId.HEALTHCHECK in config.modules,
        # Agents
        agent_claude=AgentId.CLAUDE in config.agents,
        agent_cursor=AgentId.CURSOR in config.agents,
        agent_other=AgentId.OTHER in config.agents,
        preset=config.preset.value,
        package_manager=config.package_manager.value,
    )


def config_from_context(
    context: TemplateContext,
    *,
    skip_git: bool = False,
    skip_install: bool = False,
) -> ProjectConfig:
    """Rebuild a ``ProjectConfig`` equivalent to the one *context* came from.

    The result derives the same context (and resolves the same dependencies)
    as the input config.  Normalised fields come back normalised: the
    queue dashboard is only set when queues are, and a defaulted session
    driver comes back explicit.
    """
    if context.auth_sessions:
        auth = AuthType.JWT_SESSIONS
    elif context.auth:
        auth = AuthType.JWT
    else:
        auth = AuthType.NONE

    if context.cache_redis:
        cache = CacheProvider.REDIS
    elif context.cache_memory:
        cache = CacheProvider.MEMORY
    else:
        cache = CacheProvider.NONE

    modules = []
    if context.module_upload:
        modules.append(ModuleId.UPLOAD)
    if context.module_healthcheck:
        modules.append(ModuleId.HEALTHCHECK)

    agents = [
        agent
        for agent, enabled in (
            (AgentId.CLAUDE, context.agent_claude),
            (AgentId.CURSOR, context.agent_cursor),
            (AgentId.OTHER, context.agent_other),
        )
        if enabled
    ]

    return ProjectConfig(
        project_name=context.project_name,
        preset=PresetType(context.preset),
        auth=auth,
        session_driver=SessionDriver(context.session_driver) if context.session_driver else None,
        google_oauth=context.auth_google_oauth,
        cache=cache,
        queues=context.queues,
        queue_dashboard=context.queue_dashboard,
        storage=StorageProvider(context.storage_provider or StorageProvider.NONE.value),
        email=EmailProvider(context.email_provider or EmailProvider.NONE.value),
        realtime=context.realtime,
        admin=context.admin,
        observability=(
            ObservabilityLevel.FULL if context.observability_full else ObservabilityLevel.BASIC
        ),
        modules=modules,
        agents=agents,
        package_manager=PackageManager(context.package_manager),
        skip_git=skip_git,
        skip_install=skip_install,
    )
