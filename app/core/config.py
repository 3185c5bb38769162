from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    # Tokens are issued by the auth service; this service only verifies them.
    AUTH_TOKEN_URL: str = "http://localhost:8001/auth/login"

    # Banco de dados
    DATABASE_URL: str
    SQL_ECHO: bool = False

    # Certificates
    CERTIFICATE_ISSUER: str = "AgriSkills Academy"
    CERTIFICATE_VALIDITY_DAYS: int = 730
    CERTIFICATE_BASE_URL: str = "/certificates/files"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
