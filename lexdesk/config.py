from decouple import config, Csv

DATABASE_URL = config("DATABASE_URL", default="sqlite:///./lexdesk.db")

# Auth
JWT_SECRET = config("JWT_SECRET", default="change-me-in-production")
JWT_ALGORITHM = config("JWT_ALGORITHM", default="HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = config("ACCESS_TOKEN_EXPIRE_MINUTES", default=60 * 24, cast=int)

# Server
PORT = config("PORT", default=5000, cast=int)
CORS_ORIGINS = config(
    "CORS_ORIGINS",
    default="http://localhost:5173,http://localhost:5174",
    cast=Csv(),
)
DEBUG = config("DEBUG", default=False, cast=bool)
LOG_LEVEL = config("LOG_LEVEL", default="INFO")

# Uploads are served from /uploads
UPLOAD_DIR = config("UPLOAD_DIR", default="public/uploads")
PROFILE_IMAGE_MAX_BYTES = config("PROFILE_IMAGE_MAX_BYTES", default=5 * 1024 * 1024, cast=int)

# Startup connection retries
DB_CONNECT_RETRIES = config("DB_CONNECT_RETRIES", default=5, cast=int)
DB_CONNECT_DELAY = config("DB_CONNECT_DELAY", default=5.0, cast=float)
