from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Voyager (Solr) Config
    VOYAGER_BASE_URL: str = "http://localhost:8888"
    VOYAGER_DISPLAY_ID: str = "D187992491DF"
    VOYAGER_SELECT_PATH: str = "/solr/v0/select"

    # Gazetteer Config
    GAZETTEER_BASE_URL: str = "http://172.22.1.25:8888"

    # HTTP Client Config
    HTTP_TIMEOUT: float = 15.0
    # Longer GET URLs are sent as a form-encoded POST of the same params
    MAX_GET_URL_LENGTH: int = 2000
    API_KEY: Optional[str] = None

    # Search Defaults
    DEFAULT_PAGE_SIZE: int = 48
    MAX_PAGE_SIZE: int = 500
    DEFAULT_SORT: str = "score desc"
    DEFAULT_DATE_FIELD: str = "modified"

    LOG_LEVEL: str = "INFO"

    # Allow reading from a .env file
    class Config:
        env_file = ".env"


# Settings instance
settings = Settings()
