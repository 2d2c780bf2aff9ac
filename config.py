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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./bastion.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    SEED_BUILTIN_ROLES = bool(data.get("SEED_BUILTIN_ROLES", True))
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_TTL_MINUTES = int(data.get("ACCESS_TOKEN_TTL_MINUTES", 15))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 30))
    SERVICE_ACCOUNT_TOKEN_TTL_MINUTES = int(data.get("SERVICE_ACCOUNT_TOKEN_TTL_MINUTES", 15))
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))
    MAX_SESSIONS_PER_USER = int(data.get("MAX_SESSIONS_PER_USER", 10))
    API_KEY_HEADER = data.get("API_KEY_HEADER", "X-API-Key")
