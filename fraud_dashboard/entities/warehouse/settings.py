"""
Snowflake connection settings loaded from environment variables.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings

# Mounted by Snowpark Container Services; rotated by the platform
DEFAULT_TOKEN_PATH = "/snowflake/session/token"


class SnowflakeSettings(BaseSettings):
    """Warehouse configuration loaded from environment variables."""

    SNOWFLAKE_ACCOUNT: str = "SFSENORTHAMERICA-LATAM_DEMO10"
    SNOWFLAKE_WAREHOUSE: str = "VW_COCO"
    SNOWFLAKE_DATABASE: str = "MG_COCO"
    SNOWFLAKE_SCHEMA: str = "FRAUD_DETECTION"

    # Only used with the OAuth session token
    SNOWFLAKE_HOST: str | None = None

    # Password fallback when no session token is mounted
    SNOWFLAKE_USER: str = "mgalvis"
    SNOWFLAKE_PASSWORD: str = ""

    SNOWFLAKE_TOKEN_PATH: str = DEFAULT_TOKEN_PATH

    # Cortex model used by the intelligence assistant
    CORTEX_MODEL: str = "llama3.1-70b"

    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def qualified_schema(self) -> str:
        """Fully qualified DATABASE.SCHEMA prefix for table names."""
        return f"{self.SNOWFLAKE_DATABASE}.{self.SNOWFLAKE_SCHEMA}"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> SnowflakeSettings:
    """Return the process-wide settings instance."""
    return SnowflakeSettings()
