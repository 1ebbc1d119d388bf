"""
Configuration settings for commerce-asi
Loads environment variables and provides configuration access
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment"""
    
    # Flask
    PORT: int = int(os.getenv("PORT", "8080"))
    FLASK_ENV: str = os.getenv("FLASK_ENV", "development")
    DEBUG: bool = FLASK_ENV == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    
    # Google Gemini (fallback for messages we can't classify)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    MODEL_NAME: str = os.getenv("MODEL_NAME", "gemini-2.0-flash")
    
    # Marketplaces
    RAPIDAPI_KEY: str = os.getenv("RAPIDAPI_KEY", "")
    EBAY_API_KEY: str = os.getenv("EBAY_API_KEY", "")
    
    # Qloo Taste AI
    QLOO_API_KEY: str = os.getenv("QLOO_API_KEY", "")
    QLOO_BASE_URL: str = os.getenv("QLOO_BASE_URL", "https://api.qloo.com/v1")
    
    # Redis (response cache + rate limit counters)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "600"))
    
    # Admission control
    RATE_LIMIT_MAX: int = int(os.getenv("RATE_LIMIT_MAX", "100"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
    
    # Timeouts
    REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
    
    @classmethod
    def validate(cls) -> list[str]:
        """Validate required settings, returns list of missing vars"""
        missing = []
        if not cls.GEMINI_API_KEY:
            missing.append("GEMINI_API_KEY")
        if not cls.QLOO_API_KEY:
            missing.append("QLOO_API_KEY")
        # Amazon falls back to its mock catalogue, eBay is optional
        return missing


settings = Settings()
