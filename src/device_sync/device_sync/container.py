from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .common.retry import RetryPolicy
from .core.constants import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BASE_DELAY,
    DEFAULT_RETRY_MAX_DELAY,
    DEFAULT_SYNC_WINDOW_DAYS,
)
from .core.exceptions import ConfigurationError
from .database.connection import DBConfig, DatabaseConnection
from .devices.aggregator import LogAggregator
from .devices.client import DeviceApiConfig, DeviceLogClient, HttpDeviceLogClient
from .sync.runner import SyncRunner
from .sync.service import DeviceSyncService, StatusReconciler
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    device_client: DeviceLogClient

    aggregator: LogAggregator
    reconciler: StatusReconciler
    sync_service: DeviceSyncService
    runner: SyncRunner


def retry_policy_from(settings: Mapping[str, Any]) -> RetryPolicy:
    try:
        policy = RetryPolicy(
            attempts=int(settings.get("RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS)),
            base_delay=float(settings.get("RETRY_BASE_DELAY", DEFAULT_RETRY_BASE_DELAY)),
            max_delay=float(settings.get("RETRY_MAX_DELAY", DEFAULT_RETRY_MAX_DELAY)),
        )
    except (TypeError, ValueError):
        raise ConfigurationError("RETRY_* settings must be numbers")
    if policy.attempts < 1 or policy.base_delay < 0 or policy.max_delay < 0:
        raise ConfigurationError("RETRY_* settings out of range")
    return policy


def build_container(
    *,
    db_config: Optional[dict],
    device_config: Mapping[str, Any],
    sync_config: Optional[Mapping[str, Any]] = None,
    users_repo: Optional[UserRepository] = None,
    device_client: Optional[DeviceLogClient] = None,
) -> Container:
    """Wire repositories and services; invalid settings fail here, at startup."""
    sync_config = sync_config or {}
    device = DeviceApiConfig.from_mapping(device_config)
    retry = retry_policy_from(sync_config)

    try:
        window_days = int(sync_config.get("SYNC_WINDOW_DAYS", DEFAULT_SYNC_WINDOW_DAYS))
    except (TypeError, ValueError):
        raise ConfigurationError("SYNC_WINDOW_DAYS must be an integer")
    if window_days < 1:
        raise ConfigurationError("SYNC_WINDOW_DAYS must be at least 1")

    if users_repo is None:
        if not db_config:
            raise ConfigurationError("DB_CONFIG is required")
        try:
            db = DBConfig.from_mapping(db_config)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid DB_CONFIG: {e}")
        conn = DatabaseConnection.get_instance(db)
        users_repo = MySQLUserRepository(conn)
    device_client = device_client or HttpDeviceLogClient(device, retry=retry)

    aggregator = LogAggregator(device_client, in_serial=device.in_serial, out_serial=device.out_serial)
    reconciler = StatusReconciler(users_repo, retry=retry)
    sync_service = DeviceSyncService(aggregator, reconciler, window_days=window_days)
    runner = SyncRunner(sync_service.run_pass)

    return Container(
        users_repo=users_repo,
        device_client=device_client,
        aggregator=aggregator,
        reconciler=reconciler,
        sync_service=sync_service,
        runner=runner,
    )
