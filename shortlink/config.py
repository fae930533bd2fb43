from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    # Attempts at a fresh random code before creation gives up
    CODE_GENERATION_ATTEMPTS: int = Field(5, ge=1)

    class Config:
        env_file = ".env"

settings = Settings()
