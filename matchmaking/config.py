import os
from pathlib import Path
from dotenv import load_dotenv
from fastapi.security import HTTPBearer

BASE_DIR = Path(__file__).resolve().parent.parent  # -> project root

# Load .env explicitly from project root
load_dotenv(BASE_DIR / ".env")


class Settings:
    PROJECT_NAME = "Matchmaking Backend"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Two independent secrets: user-scoped and admin-scoped tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    ADMIN_SECRET_KEY = os.getenv("ADMIN_SECRET_KEY")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
    ADMIN_TOKEN_EXPIRE_MINUTES = int(os.getenv("ADMIN_TOKEN_EXPIRE_MINUTES", 60 * 8))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

    AWS_REGION = os.getenv("AWS_REGION", "eu-north-1")
    AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
    DYNAMODB_ENDPOINT = os.getenv("DYNAMODB_ENDPOINT")
    S3_ENDPOINT = os.getenv("S3_ENDPOINT")

    USERS_TABLE = os.getenv("USERS_TABLE", "users")
    ADMINS_TABLE = os.getenv("ADMINS_TABLE", "admins")
    APPLICATIONS_TABLE = os.getenv("APPLICATIONS_TABLE", "user_bios")
    PHOTO_BUCKET = os.getenv("PHOTO_BUCKET", "user-bio-pics")
    PRESIGNED_URL_EXPIRE_SECONDS = int(os.getenv("PRESIGNED_URL_EXPIRE_SECONDS", 900))

    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")

    RESET_PASSWORD_URL = os.getenv("RESET_PASSWORD_URL", "https://jetta-matchmaking.com/reset-password")
    RESET_TOKEN_TTL_SECONDS = int(os.getenv("RESET_TOKEN_TTL_SECONDS", 3600))

    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASS = os.getenv("SMTP_PASS")
    FROM_EMAIL = os.getenv("FROM_EMAIL")

    SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "true").lower() == "true"
    DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD")

    # Missing headers reach the auth dependencies so they can answer 401 themselves
    bearer_scheme = HTTPBearer(auto_error=False)
    cors_origins = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    @property
    def table_names(self) -> dict[str, str]:
        return {
            "users": self.USERS_TABLE,
            "admins": self.ADMINS_TABLE,
            "applications": self.APPLICATIONS_TABLE,
        }


settings = Settings()
