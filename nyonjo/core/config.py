from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Nyonjo Herbs API"
    DATABASE_URL: str = "sqlite:///./nyonjo.db"
    SECRET_KEY: str = "supersecretkey_change_me_in_production"
    ALGORITHM: str = "HS256"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Admin back-office (single credential pair)
    ADMIN_EMAIL: str = "admin@nyonjoherbs.com"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_PASSWORD_HASH: Optional[str] = None  # argon2 hash, takes precedence when set
    ADMIN_SESSION_HOURS: int = 24

    # Storage (S3-compatible, e.g. Supabase Storage)
    STORAGE_ENDPOINT_URL: Optional[str] = None
    STORAGE_PUBLIC_URL: str = "http://localhost:54321/storage/v1/object/public"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"

    # Homepage feature caps
    FEATURED_PRODUCT_LIMIT: int = 2
    FEATURED_BLOG_LIMIT: int = 1
    FEATURED_SISTERHOOD_LIMIT: int = 1

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.STORAGE_PUBLIC_URL.rstrip('/')}/{bucket}/{key.lstrip('/')}"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
