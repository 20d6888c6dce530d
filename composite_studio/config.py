from __future__ import annotations
import logging
import os
import sys
from typing import Dict

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field

from .models import LayoutStrategy

# Values from a local .env never override the real environment
load_dotenv(find_dotenv(usecwd=True), override=False)

ENV_PREFIX = "COMPOSITE_STUDIO_"


class Settings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)
    scratch_dir: str = os.path.join(os.getcwd(), "studio_uploads")
    preview_max_px: int = Field(default=480, gt=0)
    log_level: str = "INFO"
    default_duration: float = Field(default=7.0, gt=0)
    default_layout: LayoutStrategy = "gridCentered"

    @classmethod
    def from_env(cls, environ: Dict[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        data = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in env and str(env[key]).strip():
                data[name] = str(env[key]).strip()
        return cls.model_validate(data)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    # Re-running (uvicorn reload, tests) must not stack handlers
    for h in list(root.handlers):
        if getattr(h, "_composite_studio", False):
            root.removeHandler(h)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handler._composite_studio = True  # type: ignore[attr-defined]
    root.addHandler(handler)
