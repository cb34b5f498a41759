"""Tests for the pydantic request models (tbk_scaffold.models)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tbk_scaffold.models import (
    FEATURE_FIELDS,
    AgentId,
    AuthType,
    ModuleId,
    PackageManager,
    PresetConfig,
    PresetFeatures,
    PresetType,
    ProjectConfig,
    StorageProvider,
)
from tbk_scaffold.scaffolder.context import create_context

pytestmark = pytest.mark.unit


class TestPresetFeatures:
    def test_defaults_are_all_off(self):
        features = PresetFeatures()
        assert features.auth == AuthType.NONE
        assert features.session_driver is None
        assert features.queues is False
        assert features.storage == StorageProvider.NONE

    def test_frozen(self):
        features = PresetFeatures()
        with pytest.raises(ValidationError):
            features.auth = AuthType.JWT

    def test_feature_fields_exclude_run_options(self):
        assert "auth" in FEATURE_FIELDS
        assert "observability" in FEATURE_FIELDS
        assert "project_name" not in FEATURE_FIELDS
        assert "modules" not in FEATURE_FIELDS

    def test_enum_values_accepted_as_strings(self):
        features = PresetFeatures(auth="jwt-sessions", session_driver="redis")
        assert features.auth == AuthType.JWT_SESSIONS

    def test_unknown_enum_value_rejected(self):
        with pytest.raises(ValidationError):
            PresetFeatures(cache="memcached")


class TestPresetConfig:
    def test_frozen(self):
        preset = PresetConfig(name="X", description="d", config=PresetFeatures())
        with pytest.raises(ValidationError):
            preset.name = "Y"


class TestProjectConfig:
    def test_minimal_construction(self):
        config = ProjectConfig(project_name="demo")
        assert config.preset == PresetType.CUSTOM
        assert config.package_manager == PackageManager.PNPM
        assert config.modules == []
        assert config.skip_git is False

    def test_project_name_required(self):
        with pytest.raises(ValidationError):
            ProjectConfig()

    @pytest.mark.parametrize("name", ["My App", "UPPER", "node_modules", "", ".dot"])
    def test_invalid_project_name(self, name: str):
        with pytest.raises(ValidationError, match="Invalid project name"):
            ProjectConfig(project_name=name)

    def test_modules_deduplicated_in_order(self):
        config = ProjectConfig(
            project_name="demo",
            storage="local",
            modules=["healthcheck", "upload", "healthcheck"],
        )
        assert config.modules == [ModuleId.HEALTHCHECK, ModuleId.UPLOAD]

    def test_agents_accept_comma_string(self):
        config = ProjectConfig(project_name="demo", agents="Claude, cursor,claude")
        assert config.agents == [AgentId.CLAUDE, AgentId.CURSOR]

    def test_unknown_agent_rejected(self):
        with pytest.raises(ValidationError):
            ProjectConfig(project_name="demo", agents=["copilot"])

    def test_upload_requires_storage(self):
        with pytest.raises(ValidationError, match="upload module requires a storage provider"):
            ProjectConfig(project_name="demo", modules=["upload"])

    def test_features_projection(self):
        config = ProjectConfig(project_name="demo", auth="jwt", realtime=True)
        features = config.features()
        assert isinstance(features, PresetFeatures)
        assert features.auth == AuthType.JWT
        assert features.realtime is True


class TestTemplateContext:
    def test_frozen(self):
        context = create_context(ProjectConfig(project_name="demo"))
        with pytest.raises(ValidationError):
            context.auth = True

    def test_as_template_vars_is_plain(self):
        context = create_context(ProjectConfig(project_name="demo", storage="s3"))
        variables = context.as_template_vars()
        assert variables["storage_provider"] == "s3"
        assert variables["preset"] == "custom"
        assert variables["session_driver"] is None
        assert all(not hasattr(value, "value") for value in variables.values())
