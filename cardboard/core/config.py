import os

# Detect environment (default to production)
ENV = os.getenv("APP_ENV", "production").lower()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./cardboard.db")

# Identity
JWT_SECRET = os.getenv("JWT_SECRET", "CHANGE_ME")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TTL_MINUTES = int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", str(60 * 24)))

# Blob storage
STORAGE_DIR = os.getenv("STORAGE_DIR", "storage")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")
CARD_IMAGES_BUCKET = "card-images"
CARD_IMAGE_CACHE_CONTROL = "3600"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "").split(",")
    if origin.strip()
]
