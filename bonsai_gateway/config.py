# bonsai_gateway/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]

# Load in ascending precedence; later overrides earlier
load_dotenv(ROOT / ".env")
load_dotenv(ROOT / ".env.local", override=True)
load_dotenv(ROOT / "bonsai_gateway" / ".env", override=True)
load_dotenv(ROOT / "bonsai_gateway" / ".env.local", override=True)

PROVIDER_MODES = ("auto", "stub", "live")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(name, default)
    if isinstance(val, str):
        val = val.strip()
        return val or default
    return val


def _env_int(name: str, default: int) -> int:
    return int(_env(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(_env(name, str(default)))


class Settings:
    def __init__(self):
        # Server
        self.PORT: int = _env_int("PORT", 8000)
        self.DATA_DIR: str = _env("DATA_DIR", str(ROOT / "data"))
        self.LOG_LEVEL: str = (_env("LOG_LEVEL", "INFO") or "INFO").upper()
        self.PUBLIC_BASE_URL: str = _env("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

        # CORS
        self.ALLOWED_ORIGINS: list[str] = [
            s.strip() for s in (_env("ALLOWED_ORIGINS", "http://localhost:5173") or "").split(",") if s.strip()
        ]

        # Workspaces must live under this prefix
        self.WORKSPACE_PREFIX: str = _env("WORKSPACE_PREFIX", "/home/scrapybara/")

        # Providers: auto | stub | live
        mode = (_env("PROVIDER_MODE", "auto") or "auto").lower()
        if mode not in PROVIDER_MODES:
            raise ValueError(f"Unknown PROVIDER_MODE: {mode!r}")
        self.PROVIDER_MODE: str = mode
        self.UPSTREAM_TIMEOUT_SEC: float = _env_float("UPSTREAM_TIMEOUT_SEC", 30.0)

        # Cursor
        self.CURSOR_API_KEY: Optional[str] = _env("CURSOR_API_KEY")
        self.CURSOR_API_URL: str = _env("CURSOR_API_URL", "https://api.cursor.com/v1").rstrip("/")

        # Scrapybara
        self.SCRAPYBARA_API_KEY: Optional[str] = _env("SCRAPYBARA_API_KEY")
        self.SCRAPYBARA_URL: str = _env("SCRAPYBARA_URL", "https://api.scrapybara.com").rstrip("/")

        # Mem0
        self.MEM0_API_KEY: Optional[str] = _env("MEM0_API_KEY")
        self.MEM0_API_URL: str = _env("MEM0_API_URL", "https://api.mem0.ai/v1").rstrip("/")
        self.MEM0_USER_ID: str = _env("MEM0_USER_ID", "bons-ai-system")

        # Pipedream
        self.PIPEDREAM_API_KEY: Optional[str] = _env("PIPEDREAM_API_KEY")
        self.PIPEDREAM_API_URL: str = _env("PIPEDREAM_API_URL", "https://api.pipedream.com/v1").rstrip("/")

        # CopyCapy
        self.COPYCAPY_API_KEY: Optional[str] = _env("COPYCAPY_API_KEY")
        self.COPYCAPY_API_URL: str = _env("COPYCAPY_API_URL", "https://api.copyCapy.com/v1").rstrip("/")

        # DeepSeek (OpenAI-compatible)
        self.DEEPSEEK_API_KEY: Optional[str] = _env("DEEPSEEK_API_KEY")
        self.DEEPSEEK_BASE_URL: str = _env("DEEPSEEK_BASE_URL", "https://api.deepseek.com/v1")
        self.DEEPSEEK_MODEL: str = _env("DEEPSEEK_MODEL", "deepseek-coder")

        # MCP registry
        self.MCP_REGISTRY_PATH: str = _env("MCP_REGISTRY_PATH", str(Path(self.DATA_DIR) / "mcp_registry.json"))
        self.MCP_INSTALL_DELAY_MS: int = _env_int("MCP_INSTALL_DELAY_MS", 2000)
        self.MCP_START_DELAY_MS: int = _env_int("MCP_START_DELAY_MS", 1000)
        self.MCP_STOP_DELAY_MS: int = _env_int("MCP_STOP_DELAY_MS", 500)
        self.SCRAPE_SOURCE_DELAY_MS: int = _env_int("SCRAPE_SOURCE_DELAY_MS", 2000)

        # AI budgets (emergency brake)
        self.GOOGLE_AI_DAILY_QUOTA: int = _env_int("GOOGLE_AI_DAILY_QUOTA", 300000)
        self.VERTEX_AI_CREDITS: float = _env_float("VERTEX_AI_CREDITS", 240.0)
        self.OPENROUTER_DAILY_BUDGET: float = _env_float("OPENROUTER_DAILY_BUDGET", 10.0)

    def configured_vendors(self) -> dict[str, bool]:
        return {
            "cursor": bool(self.CURSOR_API_KEY),
            "scrapybara": bool(self.SCRAPYBARA_API_KEY),
            "mem0": bool(self.MEM0_API_KEY),
            "pipedream": bool(self.PIPEDREAM_API_KEY),
            "copycapy": bool(self.COPYCAPY_API_KEY),
            "deepseek": bool(self.DEEPSEEK_API_KEY),
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
