import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    AZURE_FUNCTION_BASE_URL: str = ""
    AZURE_FUNCTION_CODE: str = ""
    UPSTREAM_TIMEOUT_SECONDS: float = 30.0

    DIRECTORY_SEARCH_URL: str = ""
    AZURE_FUNCTION_KEY: str = ""
    DIRECTORY_MIN_QUERY_LENGTH: int = 3
    DIRECTORY_DEBOUNCE_SECONDS: float = 0.35
    DIRECTORY_CACHE_SIZE: int = 256
    DIRECTORY_CACHE_TTL_SECONDS: float = 300.0

    TRACKER_STATUS_CONCURRENCY: int = 8

    AZURE_AD_TENANT_ID: str = ""
    AZURE_AD_CLIENT_ID: str = ""

    DEV_USER_EMAIL: str = ""
    DEV_USER_NAME: str = "Development User"
    DEV_USER_ROLES: str = "supervisor"

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    HALLMARKS_URL: str = "https://integracare.sharepoint.com/sites/ITHub/Dashboards/36_Hallmarks"

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def auth_configured(self) -> bool:
        return bool(self.AZURE_AD_TENANT_ID and self.AZURE_AD_CLIENT_ID)

    @property
    def functions_configured(self) -> bool:
        return bool(self.AZURE_FUNCTION_BASE_URL and self.AZURE_FUNCTION_CODE)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
