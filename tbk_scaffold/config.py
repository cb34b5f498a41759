"""Tool-level configuration.

Settings that affect how the scaffolder runs rather than what it generates:
where the template tree lives, which version pins go into the generated
manifest, and how chatty the console output is.  The per-project feature
selection lives in :mod:`tbk_scaffold.models`.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from tbk_scaffold.errors import ConfigurationError

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "scaffolder" / "templates"


class Settings(BaseModel):
    """Global scaffolder settings.

    Instances are typically created once by the CLI entry point and handed to
    ``ProjectGenerator``.
    """

    templates_dir: Path = Field(
        default=DEFAULT_TEMPLATES_DIR,
        description="Root of the template tree (base/, feature areas, modules/)",
    )
    package_manager_version: str = Field(
        default="9.9.0",
        description="Version pinned in the generated package.json packageManager field",
    )
    node_engine: str = Field(
        default=">=18.0.0",
        description="Node.js engine constraint written to package.json",
    )
    command_timeout: int = Field(
        default=600, ge=10, description="Timeout in seconds for install and git commands"
    )
    verbose: bool = Field(default=False, description="Report skipped and written files")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            TBK_TEMPLATES_DIR, TBK_PACKAGE_MANAGER_VERSION, TBK_NODE_ENGINE,
            TBK_COMMAND_TIMEOUT, TBK_VERBOSE.

        Raises:
            ConfigurationError: If a variable holds an unusable value.
        """
        kwargs: dict[str, object] = {}
        if os.environ.get("TBK_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["TBK_TEMPLATES_DIR"])
        if os.environ.get("TBK_PACKAGE_MANAGER_VERSION"):
            kwargs["package_manager_version"] = os.environ["TBK_PACKAGE_MANAGER_VERSION"]
        if os.environ.get("TBK_NODE_ENGINE"):
            kwargs["node_engine"] = os.environ["TBK_NODE_ENGINE"]
        timeout = os.environ.get("TBK_COMMAND_TIMEOUT", "").strip()
        if timeout:
            try:
                kwargs["command_timeout"] = int(timeout)
            except ValueError as exc:
                raise ConfigurationError(
                    f"TBK_COMMAND_TIMEOUT must be a whole number of seconds, got {timeout!r}"
                ) from exc
        verbose = os.environ.get("TBK_VERBOSE", "").strip().lower()
        if verbose:
            kwargs["verbose"] = verbose in ("1", "true", "yes", "on")

        try:
            return cls(**kwargs)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            )
            raise ConfigurationError(f"Invalid TBK_* environment setting: {problems}") from exc
