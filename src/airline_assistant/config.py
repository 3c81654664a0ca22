"""
Configuration management for the airline assistant
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Server configuration"""
    port: int = Field(default=3001)
    host: str = Field(default="0.0.0.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="SERVER_", env_file=".env", extra="ignore")


class FlightAPIConfig(BaseSettings):
    """Flight offer search API (Amadeus) configuration"""
    api_key: Optional[str] = Field(default=None)
    api_secret: Optional[str] = Field(default=None)
    env: str = Field(default="test")  # test or production
    timeout: float = Field(default=30.0)
    token_safety_margin: int = Field(default=60)  # seconds
    default_token_lifetime: int = Field(default=1800)  # seconds
    max_offers: int = Field(default=5)

    model_config = SettingsConfigDict(env_prefix="AMADEUS_", env_file=".env", extra="ignore")

    @property
    def is_configured(self) -> bool:
        """Check that both credentials are present"""
        return bool(self.api_key and self.api_secret)

    @property
    def base_url(self) -> str:
        if self.env.lower() == "production":
            return "https://api.amadeus.com"
        return "https://test.api.amadeus.com"


class ScraperConfig(BaseSettings):
    """Knowledge scraper configuration"""
    cache_ttl: int = Field(default=3600)  # 1 hour
    max_retries: int = Field(default=3)
    retry_delay: float = Field(default=2.0)  # seconds, doubled per attempt
    request_timeout: float = Field(default=30.0)
    max_content_length: int = Field(default=5000)
    min_content_length: int = Field(default=100)
    preload_interval: int = Field(default=60)  # seconds
    baggage_url: str = Field(
        default="https://www.airindia.com/content/air-india/in/en/frequently-asked-questions/baggage.html"
    )
    check_in_url: str = Field(
        default="https://www.airindia.com/content/air-india/in/en/frequently-asked-questions/check-in.html"
    )
    booking_url: str = Field(
        default="https://www.airindia.com/content/air-india/in/en/frequently-asked-questions/booking.html"
    )
    policies_url: str = Field(
        default="https://www.airindia.com/content/air-india/in/en/frequently-asked-questions/cancellation-refund.html"
    )
    maharaja_club_url: str = Field(
        default="https://www.airindia.com/in/en/maharaja-club/faqs.html"
    )

    model_config = SettingsConfigDict(env_prefix="SCRAPER_", env_file=".env", extra="ignore")

    @property
    def page_urls(self) -> dict:
        """Section name -> page URL, in fetch order"""
        return {
            "baggage": self.baggage_url,
            "check_in": self.check_in_url,
            "booking": self.booking_url,
            "policies": self.policies_url,
            "maharaja_club": self.maharaja_club_url,
        }


class CompletionConfig(BaseSettings):
    """LLM completion (OpenAI) configuration"""
    api_key: Optional[str] = Field(default=None)
    model: str = Field(default="gpt-3.5-turbo")
    temperature: float = Field(default=0.3)
    max_tokens: int = Field(default=1000)

    model_config = SettingsConfigDict(env_prefix="OPENAI_", env_file=".env", extra="ignore")


class LoggingConfig(BaseSettings):
    """Logging configuration"""
    level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    model_config = SettingsConfigDict(env_prefix="LOGGING_", env_file=".env", extra="ignore")


class Config:
    """Main configuration class"""

    def __init__(self):
        self.server = ServerConfig()
        self.flight_api = FlightAPIConfig()
        self.scraper = ScraperConfig()
        self.completion = CompletionConfig()
        self.logging = LoggingConfig()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.server.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.server.environment.lower() == "production"


# Global configuration instance
config = Config()
