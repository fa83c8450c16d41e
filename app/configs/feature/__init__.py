from pydantic import Field, NonNegativeInt, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings


class LoggingConfig(BaseSettings):
    """
    Configuration for application logging
    """

    LOG_LEVEL: str = Field(
        description="Logging level, default to INFO. Set to ERROR for production environments.",
        default="INFO",
    )

    LOG_FILE: str | None = Field(
        description="File path for log output.",
        default=None,
    )

    LOG_FILE_MAX_SIZE: PositiveInt = Field(
        description="Maximum file size for file rotation retention, the unit is megabytes (MB)",
        default=20,
    )

    LOG_FILE_BACKUP_COUNT: PositiveInt = Field(
        description="Maximum file backup count file rotation retention",
        default=5,
    )

    LOG_FORMAT: str = Field(
        description="Format string for log messages",
        default=(
            "%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] "
            "[%(filename)s:%(lineno)d] %(trace_id)s - %(message)s"
        ),
    )

    LOG_DATEFORMAT: str | None = Field(
        description="Date format string for log timestamps",
        default=None,
    )

    LOG_TZ: str | None = Field(
        description="Timezone for log timestamps (e.g., 'America/New_York')",
        default="UTC",
    )


class HttpRequestConfig(BaseSettings):
    """
    Defaults for background HTTP requests and the httpx transport
    """

    HTTP_REQUEST_CHUNK_SIZE: PositiveInt = Field(
        description="Upper bound in bytes of a single read from the response body",
        default=64 * 1024,
    )

    HTTP_REQUEST_MAX_BYTES_ON_MEMORY: NonNegativeInt = Field(
        description="Response bytes kept in memory by HttpRequestClient requests, 0 streams without retaining",
        default=10 * 1024 * 1024,
    )

    HTTP_REQUEST_CONNECT_TIMEOUT: PositiveFloat = Field(
        description="Connection timeout in seconds for HTTP requests",
        default=10,
    )

    HTTP_REQUEST_READ_TIMEOUT: PositiveFloat = Field(
        description="Read timeout in seconds for HTTP requests",
        default=600,
    )

    HTTP_REQUEST_WRITE_TIMEOUT: PositiveFloat = Field(
        description="Write timeout in seconds for HTTP requests",
        default=600,
    )

    HTTP_REQUEST_SSL_VERIFY: bool = Field(
        description="Enable or disable SSL verification for HTTP requests",
        default=True,
    )

    HTTP_REQUEST_FOLLOW_REDIRECTS: bool = Field(
        description="Whether the transport follows redirects",
        default=True,
    )

    HTTP_REQUEST_PROXY_URL: str | None = Field(
        description="Proxy URL used by the default transport",
        default=None,
    )

    HTTP_REQUEST_RAISE_FOR_STATUS: bool = Field(
        description="Treat responses with status >= 400 as transport errors",
        default=True,
    )

    HTTP_REQUEST_DEFAULT_CHARSET: str = Field(
        description="Charset used to decode text responses that declare none",
        default="utf-8",
    )


class FeatureConfig(
    LoggingConfig,
    HttpRequestConfig,
):
    pass
