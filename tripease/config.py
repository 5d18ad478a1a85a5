from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class ProviderSettings(BaseModel):
    url: str = ""
    method: Literal["GET", "POST"] = "GET"
    api_key: str = ""
    api_key_param: str = ""
    token_url: str = ""
    client_id: str = ""
    client_secret: str = ""
    results_key: str = ""
    timeout: float = 15.0
    cache_ttl: int = 3600

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @property
    def uses_oauth(self) -> bool:
        return bool(self.token_url)


class Settings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    log_level: str = "INFO"

    destinations: ProviderSettings = ProviderSettings()
    hotels: ProviderSettings = ProviderSettings()
    buses: ProviderSettings = ProviderSettings()
    trains: ProviderSettings = ProviderSettings()
    flights: ProviderSettings = ProviderSettings()

    token_safety_margin: float = 60.0
    token_timeout: float = 10.0
    cache_max_entries: int = 1024
    cache_sweep_interval: float = 300.0
    search_deadline: float = 8.0
    default_page_limit: int = 20
    catalog_seed_path: str = ""

    def providers(self) -> dict[str, ProviderSettings]:
        """Configured providers keyed by name, in merge order."""
        return {
            "destinations": self.destinations,
            "hotels": self.hotels,
            "buses": self.buses,
            "trains": self.trains,
            "flights": self.flights,
        }
