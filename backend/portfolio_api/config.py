from __future__ import annotations
from pathlib import Path
from typing import Literal
from pydantic import BaseModel
import yaml

class Cfg(BaseModel):
    host: str = "0.0.0.0"; port: int = 3000
    data_file: Path = Path("portfolios.json")
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    cors_origins: list[str] = ["*"]

CFG_PATH = Path("config.yaml")

def load_config(path: Path | str | None = None) -> Cfg:
    p = Path(path) if path is not None else CFG_PATH
    if not p.exists():
        return Cfg()
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    return Cfg(**data)
