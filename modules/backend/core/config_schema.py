"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    DatabaseSchema     → database.yaml
    LoggingSchema      → logging.yaml
    GatewaySchema      → gateway.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class TimeoutsSchema(_StrictBase):
    database: int


class RoutingSchema(_StrictBase):
    """Update routing policy for envelopes carrying more than one branch."""

    strategy: Literal["fan_out", "first_match"]
    concurrent_branches: bool


class HealthChecksSchema(_StrictBase):
    ready_timeout_seconds: int


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    server: ServerSchema
    cors: CorsSchema
    timeouts: TimeoutsSchema
    routing: RoutingSchema
    health_checks: HealthChecksSchema


# =============================================================================
# database.yaml
# =============================================================================


class RedisSchema(_StrictBase):
    host: str
    port: int
    db: int


class DatabaseSchema(_StrictBase):
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool
    create_tables: bool
    redis: RedisSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# gateway.yaml
# =============================================================================


class WebhookSchema(_StrictBase):
    path: str
    public_url: str
    set_on_startup: bool
    drop_pending_updates: bool


class CircuitBreakerSchema(_StrictBase):
    fail_max: int
    reset_timeout_seconds: int


class BackendLinkSchema(_StrictBase):
    base_url: str
    timeout_seconds: float
    circuit_breaker: CircuitBreakerSchema


class GatewaySchema(_StrictBase):
    server: ServerSchema
    webhook: WebhookSchema
    backend: BackendLinkSchema
