import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env
load_dotenv()

# Session settings
SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")  # Replace with strong env value in production
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 480))

# Library storage
LIBRARY_DB_PATH = os.getenv("LIBRARY_DB_PATH", "data/library.sqlite3")
LIBRARY_KEY = os.getenv("LIBRARY_KEY", "escola360_library")  # well-known key of the saved collection

# CORS
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173").split(",")
    if o.strip()
]


# -------------------------
# AI provider
# -------------------------
class AIConfig(BaseSettings):
    """AI configuration with environment variable support (AI_ prefix)."""

    provider: str = "google-gemini"  # "google-gemini" or "openai"
    api_url: str = "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
    api_key: str = ""
    model: str = "gemini-2.5-flash"
    max_retries: int = 0  # single attempt; retrying is a user action
    timeout: float = 120.0  # bimester plans are long outputs
    temperature: float = 0.7
    system_instruction: str = (
        "Responda sempre em Português do Brasil. Atue como coordenador pedagógico experiente."
    )

    model_config = SettingsConfigDict(env_prefix="AI_", case_sensitive=False, env_file=".env", extra="ignore")
