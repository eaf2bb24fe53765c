"""Process-wide backend settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MEBIBYTE = 1024 * 1024


class BackendSettings(BaseSettings):
    """libvips tuning applied once by ``initialize()``.

    Values can be overridden through ``CL_RESIZE_*`` environment variables
    (e.g. ``CL_RESIZE_CACHE_MAX_MEM=52428800``) or a ``.env`` file.
    """

    concurrency: int = Field(default=1, ge=1, description="Worker threads per libvips operation")
    cache_max_mem: int = Field(
        default=100 * MEBIBYTE, ge=0, description="Operation cache memory ceiling in bytes"
    )
    cache_max: int = Field(default=500, ge=0, description="Operation cache entry ceiling")

    model_config = SettingsConfigDict(env_prefix="CL_RESIZE_", env_file=".env", extra="ignore")
