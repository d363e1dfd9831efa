# business_hub/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file

class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "AI Business Hub API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:9002",
        "http://127.0.0.1:9002",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Credit ledger
    daily_credits: int = int(os.getenv("DAILY_CREDITS", "50"))
    # "Today" is evaluated in this zone for the lazy daily reset
    credits_timezone: str = os.getenv("CREDITS_TIMEZONE", "UTC")
    # Seed grants applied at startup, format: "alice@example.com:100,bob@example.com:80"
    credit_grants: str = os.getenv("CREDIT_GRANTS", "")

    # Rooms
    default_max_members: int = int(os.getenv("DEFAULT_MAX_MEMBERS", "10"))
    room_id_length: int = 6

    # Generative backend (OpenAI-compatible chat completions)
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_api_url: str = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    gpt_model: str = os.getenv("GPT_MODEL", "gpt-4o-mini")
    generation_timeout: float = float(os.getenv("GENERATION_TIMEOUT", "60"))

    # OAuth popup sign-in: the client hands us the provider access token
    google_userinfo_url: str = os.getenv("GOOGLE_USERINFO_URL", "https://www.googleapis.com/oauth2/v3/userinfo")

settings = Settings()  # Instantiate configuration
