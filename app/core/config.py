from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    TOKEN_NAME: str = "auth_token"

    USERS_PER_PAGE: int = 10
    MAX_PAGE: int = 1_000_000

    API_TITLE: str = "User Management API"
    API_DESCRIPTION: str = "RESTful API for authenticating and managing user records"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    CREATE_TABLES: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
