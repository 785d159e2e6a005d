import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Backend API
    api_base_url: str = os.getenv("API_BASE_URL", "https://mimamsabackend.onrender.com/api")
    api_timeout: float = float(os.getenv("API_TIMEOUT", "15"))
    api_connect_timeout: float = float(os.getenv("API_CONNECT_TIMEOUT", "5"))

    # Durable storage (session record)
    storage_file: str = os.getenv(
        "MIMANASA_STORAGE_FILE",
        os.path.join(os.path.expanduser("~"), ".mimanasa", "storage.db"),
    )
    session_key: str = os.getenv("MIMANASA_SESSION_KEY", "@user_session")

    # Application
    app_name: str = os.getenv("APP_NAME", "Mimanasa")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    environment: str = os.getenv("ENV", "production")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG" if _env_flag("DEBUG") else "WARNING")

    # Form rules
    otp_length: int = int(os.getenv("OTP_LENGTH", "6"))
    min_password_length: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

    # Reader / catalog
    reader_page_lines: int = int(os.getenv("READER_PAGE_LINES", "30"))
    default_language: str = os.getenv("DEFAULT_LANGUAGE", "Hindi")


settings = Settings()
