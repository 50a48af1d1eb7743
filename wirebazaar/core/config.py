from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "WireBazaar"
    ENVIRONMENT: str = "development"

    # Logging (unset: DEBUG/text in development, INFO/json in production)
    LOG_LEVEL: Optional[str] = None
    LOG_FORMAT: Optional[str] = None

    # Supabase (auth, tables, realtime)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # Redis (guest carts, rate limiting)
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # JWT
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_CUSTOMER_TOKEN_EXPIRE_DAYS: int = 30
    JWT_OWNER_TOKEN_EXPIRE_HOURS: int = 24

    # Checkout
    UPI_PAYEE_VPA: str = "wirebazaar@upi"
    UPI_PAYEE_NAME: str = "WireBazaar"
    FREE_SHIPPING_THRESHOLD: float = 5000.0
    FLAT_SHIPPING_COST: float = 150.0
    ESTIMATED_DELIVERY_DAYS: int = 5

    # Guest carts
    GUEST_CART_TTL_DAYS: int = 7

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
