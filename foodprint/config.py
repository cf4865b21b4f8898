from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""

    text_model: str = "claude-sonnet-4-5-20250929"
    vision_model: str = "claude-sonnet-4-5-20250929"  # Same model handles image input
    max_tokens: int = 1000
    temperature: float = 0.3

    # Anthropic API timeout settings (seconds)
    anthropic_timeout: int = 30
    anthropic_connect_timeout: int = 10  # Connection establishment
    anthropic_max_attempts: int = 3

    # Image upload limits
    max_image_size_mb: int = 20
    max_image_width: int = 1568  # Wider images are downscaled before upload

    # When False, generator outages surface as 503/429 instead of a fallback estimate
    fallback_on_generation_error: bool = True

    environment: str = "production"  # "development" exposes error details
    log_level: str = "INFO"

    service_name: str = "Foodprint API"
    version: str = "1.0.0"

    class Config:
        env_file = ".env"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
