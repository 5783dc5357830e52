#!filepath: evalflow/config/app_config.py
from __future__ import annotations

import os
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .log_config import LogConfig
from .workflow_config import EngineConfig, WorkflowConfig

DEFAULT_CONFIG_FILE = "evalflow.yml"


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    engine: Optional[EngineConfig] = None

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env

        Path resolution:
        - explicit ``path``
        - $EVALFLOW_CONFIG
        - ./evalflow.yml
        """
        # 1) .env in the working directory (missing file is fine)
        load_dotenv(os.path.join(os.getcwd(), ".env"))

        # 2) 决定配置文件路径
        if path is None:
            path = os.getenv("EVALFLOW_CONFIG", DEFAULT_CONFIG_FILE)

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) 读取 YAML
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        # 4) env overrides for logging
        log = dict(raw.get("log") or {})
        if os.getenv("EVALFLOW_LOG_LEVEL"):
            log["level"] = os.getenv("EVALFLOW_LOG_LEVEL")
        if os.getenv("EVALFLOW_LOG_DIR"):
            log["dir"] = os.getenv("EVALFLOW_LOG_DIR")
        raw["log"] = log

        return cls(**raw)
