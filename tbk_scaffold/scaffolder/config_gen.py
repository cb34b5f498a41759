"""Generation of the non-templated root files.

``package.json``, ``.env.example``, ``.gitignore`` and ``README.md`` are
synthesized from the config, the template context and the resolver output
rather than rendered from the template tree.  The ``build_*`` functions are
pure; ``ConfigFileGenerator`` writes their output.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from tbk_scaffold.config import Settings
from tbk_scaffold.models import ProjectConfig, TemplateContext
from tbk_scaffold.utils import write_text_file

from .dependencies import generate_scripts, resolve_dependencies, run_script_command


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------

def build_package_json(
    config: ProjectConfig, settings: Settings | None = None
) -> dict[str, Any]:
    """Return the generated ``package.json`` as an ordered dict."""
    settings = settings or Settings()
    resolved = resolve_dependencies(config)
    return {
        "name": config.project_name,
        "version": "1.0.0",
        "description": (
            f"Backend API generated with create-tbk-app ({config.preset.value} preset)"
        ),
        "main": "dist/main.js",
        "type": "commonjs",
        "scripts": generate_scripts(config),
        "keywords": ["typescript", "backend", "express", "mongodb", "api"],
        "author": "",
        "license": "ISC",
        "dependencies": resolved.dependencies,
        "devDependencies": resolved.dev_dependencies,
        "engines": {"node": settings.node_engine},
        "packageManager": (
            f"{config.package_manager.value}@{settings.package_manager_version}"
        ),
    }


# ---------------------------------------------------------------------------
# .env.example
# ---------------------------------------------------------------------------

def build_env_example(config: ProjectConfig, context: TemplateContext) -> str:
    """Return ``.env.example`` with one section per enabled feature."""
    lines: list[str] = [
        "# Core Configuration",
        "PORT=3000",
        "NODE_ENV=development",
        "",
        "# Database",
        f"MONGO_DATABASE_URL=mongodb://localhost:27017/{config.project_name}",
        "",
        "# Client",
        "CLIENT_SIDE_URL=http://localhost:3000",
        "",
    ]

    if context.auth:
        lines += [
            "# Authentication",
            "JWT_SECRET=your-secret-key-change-this-in-production",
            "JWT_EXPIRES_IN=86400",
            "",
        ]
        if context.auth_google_oauth:
            lines += [
                "# Google OAuth",
                "GOOGLE_CLIENT_ID=your-google-client-id",
                "GOOGLE_CLIENT_SECRET=your-google-client-secret",
                "GOOGLE_REDIRECT_URI=http://localhost:3000/auth/google/callback",
                "",
            ]
        if context.auth_sessions:
            lines += [
                "# Session Management",
                "SET_SESSION=1",
                f"SESSION_DRIVER={context.session_driver}",
                "SESSION_EXPIRES_IN=604800",
                "SESSION_IDLE_TIMEOUT=86400",
                "SESSION_ABSOLUTE_TIMEOUT=2592000",
                "MAX_SESSIONS_PER_USER=5",
                "SESSION_ROTATION_ENABLED=1",
                "SESSION_DEBUG=0",
                "",
            ]

    # Session cleanup jobs need Redis even when nothing else does.
    if context.cache_redis or context.queues or context.auth_sessions:
        lines += ["# Redis", "REDIS_URL=redis://localhost:6379", ""]
        if context.cache_redis:
            lines += [
                "# Cache",
                "CACHE_PROVIDER=redis",
                "CACHE_ENABLED=1",
                "CACHE_PREFIX=app",
                "CACHE_TTL=3600",
                "",
            ]
    if context.cache_memory:
        lines += ["# Cache", "CACHE_PROVIDER=memory", "CACHE_ENABLED=1", ""]

    if context.storage:
        lines += ["# File Storage", f"STORAGE_PROVIDER={context.storage_provider}"]
        if context.storage_s3 or context.storage_r2:
            lines += [
                "AWS_REGION=us-east-1",
                "AWS_ACCESS_KEY_ID=your-access-key",
                "AWS_SECRET_ACCESS_KEY=your-secret-key",
                "AWS_S3_BUCKET=your-bucket-name",
            ]
            if context.storage_r2:
                lines.append("AWS_ENDPOINT=https://your-account-id.r2.cloudflarestorage.com")
        elif context.storage_local:
            lines.append("LOCAL_STORAGE_PATH=./uploads")
        lines.append("")

    if context.email:
        lines += [
            "# Email",
            "EMAIL_FROM=noreply@example.com",
            f"EMAIL_FROM_NAME={context.project_name_pascal}",
        ]
        if context.email_resend:
            lines.append("RESEND_API_KEY=your-resend-api-key")
        elif context.email_mailgun:
            lines += [
                "MAILGUN_API_KEY=your-mailgun-api-key",
                "MAILGUN_DOMAIN=your-domain.com",
            ]
        elif context.email_smtp:
            lines += [
                "SMTP_HOST=smtp.example.com",
                "SMTP_PORT=587",
                "SMTP_USER=your-smtp-username",
                "SMTP_PASSWORD=your-smtp-password",
                "SMTP_SECURE=false",
            ]
        lines.append("")

    if context.security:
        lines += [
            "# Security",
            "CORS_ENABLED=1",
            "CORS_ORIGINS=http://localhost:3000,http://localhost:5173",
            "CORS_CREDENTIALS=1",
            "HELMET_ENABLED=1",
            "RATE_LIMIT_ENABLED=1",
            "RATE_LIMIT_WINDOW_MS=60000",
            "RATE_LIMIT_MAX=100",
            "TRUST_PROXY=0",
            "",
        ]

    if context.admin:
        lines += [
            "# Admin Panel",
            "ADMIN_AUTH_ENABLED=1",
            "ADMIN_USERNAME=admin",
            "ADMIN_PASSWORD=change-this-password",
            "",
        ]

    if context.queue_dashboard:
        lines += [
            "# Queue Dashboard",
            "QUEUE_AUTH_ENABLED=1",
            "QUEUE_USERNAME=admin",
            "QUEUE_PASSWORD=change-this-password",
            "",
        ]

    lines += [
        "# Logging",
        "LOG_LEVEL=debug  # trace | debug | info | warn | error | fatal",
        "",
    ]

    if context.observability_full:
        lines += ["# Observability", "METRICS_ENABLED=1", ""]

    lines += [
        "# Response Validation",
        "RESPONSE_VALIDATION=warn  # strict | warn | off",
        "",
    ]

    if context.auth:
        lines += [
            "# OTP Verification",
            "OTP_VERIFICATION_ENABLED=false",
            "",
            "# Seeded admin user",
            "ADMIN_EMAIL=admin@example.com",
            "",
        ]

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# .gitignore
# ---------------------------------------------------------------------------

GITIGNORE = """\
# Dependencies
node_modules/

# Build output
dist/
build/

# Environment files
.env
.env.local
.env.development
.env.production

# Logs
logs/
*.log
npm-debug.log*
pnpm-debug.log*
yarn-debug.log*
yarn-error.log*

# OS files
.DS_Store
Thumbs.db

# IDE files
.vscode/
.idea/
*.swp
*.swo
*~

# Uploads (if using local storage)
uploads/

# Test coverage
coverage/

# Temporary files
tmp/
temp/
"""


# ---------------------------------------------------------------------------
# README.md
# ---------------------------------------------------------------------------

def feature_bullets(context: TemplateContext) -> list[str]:
    """Return the README feature list for *context*."""
    features = [
        "TypeScript + Express.js",
        "MongoDB with Mongoose",
        "Auto-generated OpenAPI documentation",
        "Type-safe routing with MagicRouter",
        "Structured logging with Pino",
    ]
    if context.auth:
        if context.auth_sessions:
            features.append(
                f"JWT Authentication with Session Management ({context.session_driver})"
            )
        else:
            features.append("JWT Authentication")
        if context.auth_google_oauth:
            features.append("Google OAuth login")
    if context.security:
        features.append("Security hardening (Helmet, CORS, Rate Limiting)")
    if context.cache:
        features.append(f"Caching ({'Redis' if context.cache_redis else 'Memory'})")
    if context.queues:
        features.append("Background jobs (BullMQ)")
    if context.queue_dashboard:
        features.append("Queue monitoring dashboard")
    if context.storage:
        features.append(f"File storage ({(context.storage_provider or '').upper()})")
    if context.email:
        features.append(f"Email sending ({context.email_provider})")
    if context.realtime:
        features.append("Real-time features (Socket.IO)")
    if context.admin:
        features.append("Admin panel")
    if context.observability_full:
        features.append("Full observability (Logging, Metrics, Health checks)")
    if context.module_upload:
        features.append("Upload module")
    if context.module_healthcheck:
        features.append("Healthcheck module")
    return features


def build_readme(config: ProjectConfig, context: TemplateContext) -> str:
    """Return the generated ``README.md``."""
    pm = config.package_manager.value

    def run(script: str) -> str:
        return run_script_command(config.package_manager, script)

    lines: list[str] = [
        f"# {config.project_name}",
        "",
        f"Backend API generated with **create-tbk-app** using the "
        f"**{config.preset.value}** preset.",
        "",
        "## Features",
        "",
    ]
    lines += [f"- {feature}" for feature in feature_bullets(context)]
    lines += [
        "",
        "## Getting Started",
        "",
        "### Prerequisites",
        "",
        "- Node.js >= 18.0.0",
        "- MongoDB",
    ]
    if context.cache_redis or context.queues or context.auth_sessions:
        lines.append("- Redis")
    lines += [
        "",
        "### Installation",
        "",
        "1. Install dependencies:",
        "",
        "```bash",
        f"{pm} install",
        "```",
        "",
        "2. Copy environment variables:",
        "",
        "```bash",
        "cp .env.example .env.development",
        "```",
        "",
        "3. Update `.env.development` with your configuration",
        "",
    ]
    if context.storage_s3 or context.storage_r2:
        lines += ["> **Note:** Configure your AWS/R2 credentials for file storage", ""]
    if context.email:
        lines += [
            f"> **Note:** Configure your {context.email_provider} credentials for email sending",
            "",
        ]
    lines += [
        "4. Start development server:",
        "",
        "```bash",
        run("dev"),
        "```",
        "",
        "## Available Commands",
        "",
        "```bash",
        f"{run('dev'):<24}# Start dev server with hot reload",
        f"{run('build'):<24}# Build for production",
        f"{run('start:prod'):<24}# Run production build",
        f"{run('typecheck'):<24}# Type check without building",
        f"{run('lint'):<24}# Run ESLint",
        f"{run('lint:fix'):<24}# Auto-fix linting issues",
        f"{run('tbk'):<24}# Run CLI tool (see below)",
    ]
    if context.auth:
        lines.append(f"{run('seed'):<24}# Seed the database")
    lines += [
        "```",
        "",
        "## CLI Tool",
        "",
        "Generate new modules, plugins, and more:",
        "",
        "```bash",
        f"{run('tbk')} generate:module <name>     # Generate CRUD module",
        f"{run('tbk')} generate:plugin <name>     # Generate plugin",
        f"{run('tbk')} generate:middleware <name> # Generate middleware",
    ]
    if context.auth:
        lines += [
            f"{run('tbk')} make:factory <module>/<name>  # Generate factory",
            f"{run('tbk')} make:seeder <module>/<name>   # Generate seeder",
            f"{run('tbk')} seed                          # Run seeders",
        ]
    lines += [
        "```",
        "",
        "## API Documentation",
        "",
        "Once the server is running, visit:",
        "",
        "- **Swagger UI:** http://localhost:3000/docs",
        "- **OpenAPI Spec:** http://localhost:3000/openapi.yml",
        "",
    ]
    if context.observability_full:
        lines += [
            "## Monitoring",
            "",
            "- **Health Check:** http://localhost:3000/ops/health",
            "- **Metrics:** http://localhost:3000/ops/metrics",
            "",
        ]
    if context.admin:
        lines += [
            "## Admin Panel",
            "",
            "Access the admin panel at http://localhost:3000/admin",
            "",
            "Default credentials (change in `.env.development`):",
            "- Username: admin",
            "- Password: change-this-password",
            "",
        ]
    if context.queue_dashboard:
        lines += [
            "## Queue Dashboard",
            "",
            "Monitor background jobs at http://localhost:3000/queues",
            "",
        ]
    if context.realtime:
        lines += [
            "## Real-time Testing",
            "",
            "Test Socket.IO at http://localhost:3000/realtime",
            "",
        ]
    lines += [
        "## Project Structure",
        "",
        "```",
        "src/",
        "├── app/              # Application setup",
        "├── config/           # Configuration",
        "├── lib/              # Core libraries",
        "├── middlewares/      # Express middlewares",
        "├── modules/          # Feature modules",
        "├── plugins/          # Plugin system",
        "├── routes/           # Route registration",
        "├── utils/            # Utilities",
        "└── main.ts           # Entry point",
        "```",
        "",
        "## License",
        "",
        "ISC",
        "",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


class ConfigFileGenerator:
    """Writes the synthesized root files of a generated project."""

    def __init__(
        self,
        config: ProjectConfig,
        context: TemplateContext,
        settings: Settings | None = None,
    ) -> None:
        self.config = config
        self.context = context
        self.settings = settings or Settings()

    async def generate_all(self, project_root: Path) -> dict[str, Path]:
        """Write all four files into *project_root*.

        Returns:
            Mapping of file name to written path.
        """
        files = {
            "package.json": json.dumps(
                build_package_json(self.config, self.settings), indent=2
            ) + "\n",
            ".env.example": build_env_example(self.config, self.context),
            ".gitignore": GITIGNORE,
            "README.md": build_readme(self.config, self.context),
        }
        result: dict[str, Path] = {}
        for name, content in files.items():
            path = project_root / name
            await asyncio.to_thread(write_text_file, path, content)
            result[name] = path
        return result
