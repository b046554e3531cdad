from pydantic import BaseModel
import os
from typing import Optional


class Settings(BaseModel):
    # Compilation service
    llc_path: str = os.getenv("IRBRIDGE_LLC", "llc")
    llc_args: list[str] = os.getenv("IRBRIDGE_LLC_ARGS", "").split()
    codegen_timeout: float = float(os.getenv("IRBRIDGE_CODEGEN_TIMEOUT", "30"))
    work_dir: Optional[str] = os.getenv("IRBRIDGE_WORK_DIR") or None
    cors_origins: list[str] = os.getenv(
        "IRBRIDGE_CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    ).split(",")
    host: str = os.getenv("IRBRIDGE_HOST", "127.0.0.1")
    port: int = int(os.getenv("IRBRIDGE_PORT", "3000"))

    # Codegen client
    service_url: str = os.getenv("IRBRIDGE_SERVICE_URL", "http://127.0.0.1:3000")
    client_timeout: float = float(os.getenv("IRBRIDGE_CLIENT_TIMEOUT", "30"))

    log_level: str = os.getenv("IRBRIDGE_LOG_LEVEL", "INFO").upper()


settings = Settings()
