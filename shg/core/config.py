from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path

# Find .env file - check shg/ directory first, then project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
APP_ENV = BASE_DIR / "shg" / ".env"
ROOT_ENV = BASE_DIR / ".env"

# Use shg/.env if it exists, otherwise try root .env
env_file = str(APP_ENV) if APP_ENV.exists() else (str(ROOT_ENV) if ROOT_ENV.exists() else ".env")

# Interest share divisor policies
INTEREST_POLICY_CURRENT_MEMBERS = "current_members"
INTEREST_POLICY_MEMBERS_AT_REPAYMENT = "members_at_repayment"


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'shg.db'}"

    # Group whose books are shown when a request does not name one
    VIEWING_USER_ID: Optional[str] = None

    # Ledger policy
    INTEREST_SHARE_POLICY: str = INTEREST_POLICY_CURRENT_MEMBERS
    BULK_DEPOSIT_CHUNK_SIZE: int = 200  # 2 writes per member, store batch ceiling is 500

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    AUDIT_LOG_DIR: Optional[str] = None  # defaults to <project>/logs
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = env_file
        case_sensitive = True


settings = Settings()

# Derived paths
LOGS_DIR = BASE_DIR / "logs"
