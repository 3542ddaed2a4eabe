"""
Configuración centralizada de la aplicación
"""
from pydantic_settings import BaseSettings
from typing import Dict, List, Optional


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # API Settings
    API_TITLE: str = "Storefront Orders API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Order placement and inventory consistency engine"
    API_DEBUG: bool = False

    # Database
    DATABASE_URL: str = "postgresql://localhost:5432/storefront"
    DB_CONNECT_RETRIES: int = 3
    DB_RETRY_DELAY: float = 1.0

    # Auth (JWT issued by the session service)
    AUTH_SECRET: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    # Rate limiting. REDIS_URL switches to the shared backend (multi-instance)
    RATE_LIMIT_ENABLED: bool = True
    REDIS_URL: Optional[str] = None

    # (window_seconds, max_requests) per endpoint class
    RATE_LIMIT_PRESETS: Dict[str, List[int]] = {
        "standard": [60, 100],
        "auth": [15 * 60, 10],
        "write": [60, 30],
        "public_read": [60, 200],
        "admin": [60, 50],
    }

    # Orders
    ORDER_INITIAL_STATUS: str = "PROCESSING"
    MAX_QUANTITY_PER_ITEM: int = 999
    LOW_STOCK_THRESHOLD: int = 5

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
