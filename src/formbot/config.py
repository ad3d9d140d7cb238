from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()

UI_LANGS = ("en", "uk")

def _split_csv_ints(s: str) -> List[int]:
    out = []
    for part in (s or "").split(","):
        part = part.strip()
        if part:
            out.append(int(part))
    return out

@dataclass(frozen=True)
class Settings:
    bot_token: str
    database_url: str
    author_ids: List[int] = field(default_factory=list)
    ui_lang: str = "en"  # en/uk

def load_settings() -> Settings:
    load_dotenv()
    bot_token = os.getenv("BOT_TOKEN")
    if not bot_token:
        raise RuntimeError("BOT_TOKEN is required")

    author_ids = _split_csv_ints(os.getenv("AUTHOR_IDS", ""))
    database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/forms.db")
    ui_lang = os.getenv("UI_LANG", "en").strip().lower()
    if ui_lang not in UI_LANGS:
        raise RuntimeError("UI_LANG must be en or uk")

    return Settings(
        bot_token=bot_token,
        database_url=database_url,
        author_ids=author_ids,
        ui_lang=ui_lang,
    )

def load_database_url() -> str:
    """Storage location for command-line tools that never talk to Telegram."""
    load_dotenv()
    return os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/forms.db")
