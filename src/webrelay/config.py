"""Configuration using pydantic-settings."""

from pydantic_settings import BaseSettings

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

SEARCH_ENGINES = {
    "google": "https://www.google.com/search",
    "duckduckgo": "https://duckduckgo.com/",
    "bing": "https://www.bing.com/search",
}


class RelaySettings(BaseSettings):
    """Proxy and relay configuration."""

    timeout: float = 15.0
    user_agent: str = DESKTOP_USER_AGENT
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"
    accept_language: str = "en-US,en;q=0.9"
    max_connections: int = 100
    max_keepalive_connections: int = 20
    search_engine: str = "google"
    max_rewrite_references: int = 50000
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = {"env_prefix": "WEBRELAY_"}


settings = RelaySettings()
