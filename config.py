import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./social.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENVIRONMENT = data.get("ENVIRONMENT", "development")
    FRONTEND_URL = data.get("FRONTEND_URL", "http://localhost:3000")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_IN = data.get("JWT_EXPIRES_IN", "24h")
    REFRESH_TOKEN_EXPIRES_IN = data.get("REFRESH_TOKEN_EXPIRES_IN", "7d")
    REQUIRE_EMAIL_VERIFICATION = bool(data.get("REQUIRE_EMAIL_VERIFICATION", False))

    # Session store
    STORE_TIMEOUT_SECONDS = float(data.get("STORE_TIMEOUT_SECONDS", 5.0))

    # Revoked-session denylist: "redis" or "memory"
    CACHE_BACKEND = data.get("CACHE_BACKEND", "redis")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")

    # Google sign-in
    GOOGLE_CLIENT_ID = data.get("GOOGLE_CLIENT_ID", "")
    GOOGLE_TOKENINFO_URL = data.get(
        "GOOGLE_TOKENINFO_URL", "https://oauth2.googleapis.com/tokeninfo"
    )

    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
