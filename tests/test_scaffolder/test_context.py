"""Tests for template context derivation (tbk_scaffold.scaffolder.context)."""

from __future__ import annotations

import pytest

from tbk_scaffold.models import AuthType, PresetType, SessionDriver
from tbk_scaffold.scaffolder.context import config_from_context, create_context

pytestmark = pytest.mark.unit


class TestCreateContext:
    def test_name_variants(self, make_context):
        context = make_context("minimal", "my-cool_app")
        assert context.project_name == "my-cool_app"
        assert context.project_name_kebab == "my-cool-app"
        assert context.project_name_pascal == "MyCoolApp"
        assert context.project_name_camel == "myCoolApp"

    def test_minimal(self, make_context):
        context = make_context("minimal")
        assert not context.auth
        assert not context.cache
        assert not context.security
        assert context.observability_basic
        assert not context.observability_full
        assert context.session_driver is None
        assert context.storage_provider is None
        assert context.email_provider is None

    def test_full(self, make_context):
        context = make_context("full")
        assert context.auth and context.auth_jwt and context.auth_sessions
        assert context.session_driver == "redis"
        assert context.cache_redis and not context.cache_memory
        assert context.queues and context.queue_dashboard
        assert context.storage_s3 and context.storage_provider == "s3"
        assert context.email_resend and context.email_provider == "resend"
        assert context.realtime and context.admin
        assert context.security
        assert context.preset == "full"

    def test_plain_jwt(self, make_context):
        context = make_context("standard")
        assert context.auth_jwt
        assert not context.auth_sessions
        assert context.session_driver is None
        assert context.cache_memory

    def test_session_driver_defaults_to_mongo(self, make_context):
        context = make_context("custom", auth="jwt-sessions", cache="none")
        assert context.auth_sessions
        assert context.session_driver == "mongo"

    def test_session_driver_ignored_without_sessions(self, make_context):
        context = make_context("custom", auth="jwt", session_driver="redis")
        assert context.session_driver is None

    def test_dashboard_and_gate(self, make_context):
        context = make_context("custom", queues=False, queue_dashboard=True)
        assert context.queue_dashboard is False

    def test_google_oauth_needs_auth(self, make_context):
        assert make_context("custom", auth="none", google_oauth=True).auth_google_oauth is False
        assert make_context("custom", auth="jwt", google_oauth=True).auth_google_oauth is True

    def test_security_follows_preset(self, make_context):
        assert make_context("custom").security is True
        assert make_context("standard").security is True
        assert make_context("minimal").security is False

    @pytest.mark.parametrize("storage", ["local", "s3", "r2"])
    def test_storage_flags_are_exclusive(self, make_context, storage):
        context = make_context("custom", storage=storage)
        flags = {
            "local": context.storage_local,
            "s3": context.storage_s3,
            "r2": context.storage_r2,
        }
        assert [name for name, on in flags.items() if on] == [storage]

    def test_module_flags(self, make_context):
        context = make_context("full", modules=["upload", "healthcheck"])
        assert context.module_upload and context.module_healthcheck

    def test_agent_flags(self, make_context):
        context = make_context("minimal", agents=["claude", "other"])
        assert context.agent_claude and context.agent_other
        assert not context.agent_cursor
        assert not make_context("minimal").agent_claude

    def test_package_manager(self, make_context):
        assert make_context("minimal", package_manager="yarn").package_manager == "yarn"


class TestConfigFromContext:
    def test_round_trip_normalises(self, make_config):
        config = make_config(
            "custom",
            auth="jwt-sessions",
            cache="memory",
            queues=False,
            queue_dashboard=True,
            storage="r2",
            email="smtp",
            observability="full",
        )
        rebuilt = config_from_context(create_context(config), skip_git=True)

        assert rebuilt.auth == AuthType.JWT_SESSIONS
        assert rebuilt.session_driver == SessionDriver.MONGO
        assert rebuilt.queue_dashboard is False
        assert rebuilt.preset == PresetType.CUSTOM
        assert rebuilt.skip_git is True
        assert create_context(rebuilt) == create_context(config)

    def test_round_trip_keeps_agents(self, make_config):
        config = make_config("standard", agents=["cursor", "claude"])
        rebuilt = config_from_context(create_context(config))
        assert set(rebuilt.agents) == set(config.agents)
        assert create_context(rebuilt) == create_context(config)
