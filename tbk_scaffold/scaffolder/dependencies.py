"""Feature resolver: package dependencies and lifecycle scripts.

Maps a ``ProjectConfig`` to the dependency maps and npm scripts of the
generated ``package.json``.  Everything here is pure; the same config always
yields the same, identically ordered, maps.

Dependencies are accumulated block by block in a fixed order (core first).
A later block overwrites any same-named package an earlier block added, so
two blocks pinning the same package must agree on the version;
:func:`find_version_conflicts` reports where they do not.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple

from tbk_scaffold.models import (
    AuthType,
    CacheProvider,
    EmailProvider,
    ObservabilityLevel,
    PackageManager,
    PresetType,
    ProjectConfig,
    SessionDriver,
    StorageProvider,
)


# ---------------------------------------------------------------------------
# Dependency tables
# ---------------------------------------------------------------------------

CORE_DEPENDENCIES: dict[str, str] = {
    "express": "^4.19.2",
    "mongoose": "^8.19.2",
    "zod": "^3.21.4",
    "dotenv": "^16.4.5",
    "@asteasolutions/zod-to-openapi": "^7.1.1",
    "swagger-ui-express": "^5.0.1",
    "openapi3-ts": "^4.3.3",
    "yaml": "^2.5.0",
    "compression": "^1.7.4",
    "cookie-parser": "^1.4.6",
    "validator": "^13.15.20",
    "express-async-handler": "^1.2.0",
    "formidable": "^3.5.4",
    # logger plugin ships with every project
    "pino": "^9.1.0",
    "pino-http": "^10.1.0",
    "pino-pretty": "^11.1.0",
    # requestId middleware
    "nanoid": "^3.3.7",
}

CORE_DEV_DEPENDENCIES: dict[str, str] = {
    "@themuneebh-oss/tbk": "^0.0.3",
    "typescript": "^5.1.6",
    "@types/express": "^4.17.15",
    "@types/node": "^24.9.2",
    "@types/cookie-parser": "^1.4.3",
    "@types/swagger-ui-express": "^4.1.6",
    "@types/validator": "^13.7.17",
    "@types/compression": "^1.7.2",
    "@types/formidable": "^3.4.6",
    "tsup": "^8.1.0",
    "tsx": "^4.19.2",
    "dotenv-cli": "^7.4.2",
    "esbuild": "^0.19.8",
    "rimraf": "^5.0.1",
    "concurrently": "^9.1.0",
    "commander": "^14.0.1",
    "eslint": "~9.4.0",
    "@eslint/js": "^9.4.0",
    "typescript-eslint": "^8.46.2",
    "eslint-config-prettier": "^9.1.0",
    "eslint-plugin-prettier": "^5.1.3",
    "eslint-plugin-import": "^2.29.1",
    "globals": "^15.3.0",
}


class FeatureDependencies(NamedTuple):
    """Runtime and development packages one feature block contributes."""

    dependencies: dict[str, str]
    dev_dependencies: dict[str, str]


FEATURE_DEPENDENCIES: dict[str, FeatureDependencies] = {
    "auth": FeatureDependencies(
        {"jsonwebtoken": "^9.0.2", "argon2": "^0.30.3"},
        {"@types/jsonwebtoken": "^9.0.6"},
    ),
    "security": FeatureDependencies(
        {"helmet": "^6.0.1", "cors": "^2.8.5", "express-rate-limit": "^8.1.0"},
        {"@types/cors": "^2.8.13"},
    ),
    "observability_full": FeatureDependencies({"prom-client": "^15.1.3"}, {}),
    "cache_redis": FeatureDependencies({"ioredis": "^5.8.2"}, {}),
    "queues": FeatureDependencies({"bullmq": "^5.63.0"}, {}),
    "queue_dashboard": FeatureDependencies(
        {"@bull-board/api": "^6.14.0", "@bull-board/express": "^6.14.0"},
        {},
    ),
    "storage": FeatureDependencies({"@aws-sdk/client-s3": "^3.922.0"}, {}),
    "email_templates": FeatureDependencies(
        {
            "@react-email/components": "^0.5.7",
            "@react-email/render": "^1.4.0",
            "react": "^19.2.0",
            "react-email": "^4.3.2",
        },
        {"@types/react": "^19.2.2", "@react-email/preview-server": "^4.3.2"},
    ),
    "email_resend": FeatureDependencies({"resend": "^4.0.0"}, {}),
    "email_mailgun": FeatureDependencies(
        {"mailgun.js": "^10.2.4", "form-data": "^4.0.4"}, {}
    ),
    "email_smtp": FeatureDependencies(
        {"nodemailer": "^6.9.13"}, {"@types/nodemailer": "^6.4.8"}
    ),
    "realtime": FeatureDependencies({"socket.io": "^4.7.5"}, {}),
}

_EMAIL_PROVIDER_BLOCKS: dict[EmailProvider, str] = {
    EmailProvider.RESEND: "email_resend",
    EmailProvider.MAILGUN: "email_mailgun",
    EmailProvider.SMTP: "email_smtp",
}


class ResolvedDependencies(NamedTuple):
    """Result of :func:`resolve_dependencies`."""

    dependencies: dict[str, str]
    dev_dependencies: dict[str, str]


class VersionConflict(NamedTuple):
    """A package whose pinned version a later feature block replaced."""

    package: str
    previous: str
    replacement: str
    block: str


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def feature_blocks(config: ProjectConfig) -> Iterator[str]:
    """Yield the names of the feature blocks *config* enables, in merge order.

    A block may be yielded more than once (``cache_redis``, ``queues``) when
    several features imply it.
    """
    if config.preset != PresetType.MINIMAL:
        yield "security"

    if config.auth != AuthType.NONE:
        yield "auth"
        if config.auth == AuthType.JWT_SESSIONS:
            # session cleanup runs as a BullMQ job
            yield "queues"
            if (
                config.session_driver == SessionDriver.REDIS
                or config.cache != CacheProvider.REDIS
            ):
                yield "cache_redis"

    if config.observability == ObservabilityLevel.FULL:
        yield "observability_full"

    if config.cache == CacheProvider.REDIS:
        yield "cache_redis"

    if config.queues:
        yield "queues"
        if config.cache != CacheProvider.REDIS:
            yield "cache_redis"

    if config.queue_dashboard and config.queues:
        yield "queue_dashboard"

    if config.storage != StorageProvider.NONE:
        yield "storage"

    if config.email != EmailProvider.NONE:
        yield "email_templates"
        yield _EMAIL_PROVIDER_BLOCKS[config.email]

    if config.realtime:
        yield "realtime"


def resolve_dependencies(config: ProjectConfig) -> ResolvedDependencies:
    """Compute the runtime and development dependency maps for *config*.

    Returns:
        ``ResolvedDependencies`` whose maps list core packages first, then
        each enabled feature's packages in block order.
    """
    dependencies = dict(CORE_DEPENDENCIES)
    dev_dependencies = dict(CORE_DEV_DEPENDENCIES)

    for block in feature_blocks(config):
        feature = FEATURE_DEPENDENCIES[block]
        dependencies.update(feature.dependencies)
        dev_dependencies.update(feature.dev_dependencies)

    return ResolvedDependencies(dependencies, dev_dependencies)


def find_version_conflicts(config: ProjectConfig) -> list[VersionConflict]:
    """Replay the merge for *config* and report silently shadowed versions.

    The resolver keeps last-write-wins semantics; this only reports where a
    block replaced a different version constraint.
    """
    seen: dict[str, str] = {**CORE_DEPENDENCIES, **CORE_DEV_DEPENDENCIES}
    conflicts: list[VersionConflict] = []
    for block in feature_blocks(config):
        feature = FEATURE_DEPENDENCIES[block]
        for package, version in {**feature.dependencies, **feature.dev_dependencies}.items():
            previous = seen.get(package)
            if previous is not None and previous != version:
                conflicts.append(VersionConflict(package, previous, version, block))
            seen[package] = version
    return conflicts


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------

def run_script_command(package_manager: PackageManager, script: str) -> str:
    """Return the shell command that runs an npm script with *package_manager*."""
    if package_manager == PackageManager.NPM:
        return f"npm run {script}"
    return f"{package_manager.value} {script}"


def generate_scripts(config: ProjectConfig) -> dict[str, str]:
    """Build the ``scripts`` section of the generated ``package.json``."""
    start_dev = run_script_command(config.package_manager, "start:dev")
    has_email = config.email != EmailProvider.NONE

    if has_email:
        email_dev = run_script_command(config.package_manager, "email:dev")
        dev = f'concurrently "{start_dev}" "{email_dev}"'
    else:
        dev = start_dev

    scripts: dict[str, str] = {
        "dev": dev,
        "start:dev": "dotenv -e .env.development -- tsx --watch ./src/main.ts",
        "build": "tsup --config build.ts",
        "start:prod": "dotenv -e .env.production -- node ./dist/main.js",
        "start:local": "dotenv -e .env.local -- node ./dist/main.js",
        "typecheck": "tsc --noEmit",
        "lint": "eslint",
        "lint:fix": "eslint --fix",
        "tbk": (
            "dotenv -e .env.development -- node --import tsx "
            "./node_modules/@themuneebh-oss/tbk/dist/cli.js"
        ),
    }

    if has_email:
        scripts["email:dev"] = "email dev --dir ./src/email/templates"

    # user module factories need auth
    if config.auth != AuthType.NONE:
        scripts["seed"] = "dotenv -e .env.development -- tsx scripts/seed.ts"

    return scripts
