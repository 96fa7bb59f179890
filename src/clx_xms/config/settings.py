"""Configuration settings for the XMS client.

Settings are loaded from ``XMS_`` prefixed environment variables and
``.env`` files. They describe where the API lives, which service plan
the calls are made for, and how the HTTP transport is sized.
"""

from typing import Literal, Optional

import httpx
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.base_models import Endpoint

DEFAULT_ENDPOINT = "https://api.clxcommunications.com/xms/v1"


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    :param endpoint: Base URL of the XMS REST API
    :type endpoint: str
    :param service_plan_id: Service plan (account) identifier used in every path
    :type service_plan_id: Optional[str]
    :param token: Bearer token used to authenticate
    :type token: Optional[SecretStr]
    :param max_connections: Maximum concurrent connections in the pool
    :type max_connections: int
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="XMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    endpoint: str = Field(DEFAULT_ENDPOINT, description="XMS API base URL")
    service_plan_id: Optional[str] = Field(
        None, description="Service plan identifier (account username)"
    )
    token: Optional[SecretStr] = Field(None, description="API bearer token")

    # Transport
    connect_timeout: float = Field(5.0, description="Connect timeout in seconds")
    read_timeout: float = Field(30.0, description="Read timeout in seconds")
    write_timeout: float = Field(10.0, description="Write timeout in seconds")
    pool_timeout: Optional[float] = Field(
        None, description="Seconds to wait for a pooled connection (None waits forever)"
    )
    max_connections: int = Field(20, description="Connection pool size")
    max_keepalive_connections: int = Field(
        10, description="Idle connections kept alive in the pool"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the endpoint so paths can be appended directly.

        :param v: The configured endpoint
        :type v: str
        :return: Endpoint without trailing slashes
        :rtype: str
        """
        return v.rstrip("/")

    @field_validator("max_connections", "max_keepalive_connections")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("connection pool sizes must be at least 1")
        return v

    @property
    def timeout(self) -> httpx.Timeout:
        """Transport timeout built from the individual settings.

        :return: Timeout configuration for the HTTP client
        :rtype: httpx.Timeout
        """
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.pool_timeout,
        )

    @property
    def limits(self) -> httpx.Limits:
        """Connection pool limits built from the individual settings.

        :return: Limits configuration for the HTTP client
        :rtype: httpx.Limits
        """
        return httpx.Limits(
            max_connections=self.max_connections,
            max_keepalive_connections=min(
                self.max_keepalive_connections, self.max_connections
            ),
        )

    def endpoint_config(self) -> Optional[Endpoint]:
        """Build the immutable endpoint, if credentials are configured.

        :return: Endpoint or None when service plan id or token is missing
        :rtype: Optional[Endpoint]
        """
        if not self.service_plan_id or self.token is None:
            return None
        return Endpoint(
            base_url=self.endpoint,
            service_plan_id=self.service_plan_id,
            token=self.token.get_secret_value(),
        )
