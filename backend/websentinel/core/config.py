import os
from functools import lru_cache
from typing import List, Optional
from pydantic import BaseModel
from dotenv import load_dotenv
load_dotenv()

DEFAULT_UA = (
    "WebSentinel/1.0 (+security-header-analyzer) "
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


class Settings(BaseModel):
    timeout: float = 10.0
    connect_timeout: float = 5.0
    user_agent: str = DEFAULT_UA
    history_path: Optional[str] = None
    history_limit: int = 10
    cors_origins: List[str] = DEFAULT_ORIGINS.split(",")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("WEBSENTINEL_CORS_ORIGINS", DEFAULT_ORIGINS)
        return cls(
            timeout=os.getenv("WEBSENTINEL_TIMEOUT", "10.0"),
            connect_timeout=os.getenv("WEBSENTINEL_CONNECT_TIMEOUT", "5.0"),
            user_agent=os.getenv("WEBSENTINEL_USER_AGENT", DEFAULT_UA),
            history_path=os.getenv("WEBSENTINEL_HISTORY_PATH") or None,
            history_limit=os.getenv("WEBSENTINEL_HISTORY_LIMIT", "10"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("WEBSENTINEL_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
