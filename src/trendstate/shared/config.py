from __future__ import annotations

import os
import pathlib
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from trendstate.domain.model.params import ModelParams


class ModelCfg(BaseModel):
    default_weights: list[int] = Field(default_factory=lambda: [1, 0, 0], min_length=3, max_length=3)
    learning_divisor: int = 10
    feature_modulus: int = 1000
    score_scale: int = 1000
    up_threshold: int = 50
    down_threshold: int = -50
    confidence_cap: int = 100
    int_bits: int = 256

    def to_params(self) -> ModelParams:
        return ModelParams(
            default_weights=tuple(self.default_weights),  # type: ignore[arg-type]
            learning_divisor=self.learning_divisor,
            feature_modulus=self.feature_modulus,
            score_scale=self.score_scale,
            up_threshold=self.up_threshold,
            down_threshold=self.down_threshold,
            confidence_cap=self.confidence_cap,
            int_bits=self.int_bits,
        )


class EnvironmentCfg(BaseModel):
    kind: Literal["simulated", "replay", "system"] = "simulated"
    replay_path: Optional[str] = None
    advance_on_commit: bool = False
    start_clock: int = 0
    start_sequence: int = 0
    start_balance: int = 0
    clock_step_per_commit: int = 0


class ScheduleCfg(BaseModel):
    run_forever: bool = False
    interval_seconds: int = 60
    steps: int = 1


class TelemetryCfg(BaseModel):
    console_enabled: bool = True
    console_channels: list[str] = Field(default_factory=lambda: ["audit"])
    console_min_level: str = "INFO"

    db_enabled: bool = False
    db_path: Optional[str] = None
    db_channels: list[str] = Field(default_factory=lambda: ["audit"])
    db_min_level: str = "INFO"
    db_batch_size: int = 50

    otel_enabled: bool = False
    otel_channels: list[str] = Field(default_factory=lambda: ["audit", "ops"])
    otel_min_level: str = "INFO"


class AppConfig(BaseModel):
    instance_id: str = "trendstate"
    controller: Optional[str] = None
    log_level: str = "INFO"
    model: ModelCfg = ModelCfg()
    environment: EnvironmentCfg = EnvironmentCfg()
    schedule: ScheduleCfg = ScheduleCfg()
    telemetry: TelemetryCfg = TelemetryCfg()


def load_config(path: str) -> AppConfig:
    load_dotenv(override=False)
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(p, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    def coalesce(yaml_val, env_val):
        return env_val if (yaml_val in (None, "") and env_val not in (None, "")) else yaml_val

    raw["controller"] = coalesce(raw.get("controller"), os.getenv("TRENDSTATE_CONTROLLER"))
    raw["instance_id"] = coalesce(raw.get("instance_id"), os.getenv("TRENDSTATE_INSTANCE_ID"))
    if raw["instance_id"] is None:
        raw.pop("instance_id")

    env_cfg = raw.setdefault("environment", {}) or {}
    env_cfg["replay_path"] = coalesce(env_cfg.get("replay_path"), os.getenv("TRENDSTATE_REPLAY_PATH"))
    raw["environment"] = env_cfg

    return AppConfig.model_validate(raw)
