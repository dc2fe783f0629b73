from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..common.datetime_utils import format_api_date
from ..common.retry import RetryPolicy
from ..core.constants import DEFAULT_DEVICE_API_TIMEOUT
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceApiConfig:
    base_url: str
    api_key: str
    in_serial: str
    out_serial: str
    timeout: float = DEFAULT_DEVICE_API_TIMEOUT

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DeviceApiConfig":
        """Validate the DEVICE_API settings; every field but timeout is required."""
        labels = {
            "base_url": "DEVICE_API_URL",
            "api_key": "DEVICE_API_KEY",
            "in_serial": "IN_DEVICE_SERIAL",
            "out_serial": "OUT_DEVICE_SERIAL",
        }
        missing = [env for key, env in labels.items() if not str(values.get(key) or "").strip()]
        if missing:
            raise ConfigurationError(f"Missing device API settings: {', '.join(missing)}")

        try:
            timeout = float(values.get("timeout") or DEFAULT_DEVICE_API_TIMEOUT)
        except (TypeError, ValueError):
            raise ConfigurationError("DEVICE_API_TIMEOUT must be a number")
        if timeout <= 0:
            raise ConfigurationError("DEVICE_API_TIMEOUT must be positive")

        return cls(
            base_url=str(values["base_url"]).strip(),
            api_key=str(values["api_key"]).strip(),
            in_serial=str(values["in_serial"]).strip(),
            out_serial=str(values["out_serial"]).strip(),
            timeout=timeout,
        )


class DeviceLogClient(Protocol):
    """Reads raw punch logs of one device for an inclusive date range."""

    def fetch_logs(self, serial: str, from_date: date, to_date: date) -> Sequence[Any]:
        raise NotImplementedError


def build_session(policy: RetryPolicy) -> requests.Session:
    """requests session retrying connection errors, 429 and 5xx with backoff."""
    retry = Retry(
        total=max(0, policy.attempts - 1),
        backoff_factor=policy.base_delay,
        backoff_max=policy.max_delay,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class HttpDeviceLogClient(DeviceLogClient):
    def __init__(self, config: DeviceApiConfig, *, session: Optional[requests.Session] = None, retry: Optional[RetryPolicy] = None):
        self._config = config
        self._session = session or build_session(retry or RetryPolicy())

    def fetch_logs(self, serial: str, from_date: date, to_date: date) -> Sequence[Any]:
        params = {
            "APIKey": self._config.api_key,
            "SerialNumber": serial,
            "FromDate": format_api_date(from_date),
            "ToDate": format_api_date(to_date),
        }
        logger.debug("Fetching logs for device %s (%s..%s)", serial, params["FromDate"], params["ToDate"])
        resp = self._session.get(self._config.base_url, params=params, timeout=self._config.timeout)
        resp.raise_for_status()
        payload = resp.json()
        if not isinstance(payload, list):
            raise ValueError(f"Expected a JSON array of logs, got {type(payload).__name__}")
        return payload

    def close(self) -> None:
        self._session.close()
