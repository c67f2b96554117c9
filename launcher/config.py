import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .constants import (
    BSC_RPC_URL,
    DEFAULT_MAX_ITERATIONS,
    SOLANA_RPC_URL,
    VANITY_SUFFIX,
)


class ConfigError(Exception):
    pass


def get_env(key: str, required: bool = True, default: str = "") -> str:
    value = os.environ.get(key, "").strip()
    if not value and required:
        raise ConfigError(f"Missing ENV variable: {key}")
    return value or default


@dataclass(frozen=True)
class Env:
    x_bearer_token: str
    groq_api_key: str
    bsc_private_key: str
    bsc_rpc_url: str = BSC_RPC_URL
    max_gwei: float = 5.0
    pinata_jwt: str = ""
    solana_rpc_url: str = SOLANA_RPC_URL
    solana_private_key: str = ""

    @staticmethod
    def from_env() -> "Env":
        load_dotenv()
        return Env(
            x_bearer_token=get_env("X_BEARER_TOKEN"),
            groq_api_key=get_env("GROQ_API_KEY"),
            bsc_private_key=get_env("BSC_PRIVATE_KEY_HEX"),
            bsc_rpc_url=get_env("BSC_RPC_URL", False, BSC_RPC_URL),
            max_gwei=float(get_env("MAX_GWEI", False, "5")),
            pinata_jwt=get_env("PINATA_JWT", False),
            solana_rpc_url=get_env("SOLANA_RPC_URL", False, SOLANA_RPC_URL),
            solana_private_key=get_env("SOLANA_PRIVATE_KEY_BASE58", False),
        )


@dataclass(frozen=True)
class VanitySettings:
    suffix: str = VANITY_SUFFIX
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS
    workers: int = 1


@dataclass(frozen=True)
class MockTweet:
    tweet_text: str = ""
    user: str = ""
    tweet_url: str = ""


@dataclass(frozen=True)
class BotConfig:
    target_users: List[str]
    initial_buy_solana: float = 0.001
    initial_buy_bsc: float = 0.0001
    auto_sell_pumpfun: bool = False
    temperature: float = 0.7
    mock: Optional[MockTweet] = None
    vanity: VanitySettings = field(default_factory=VanitySettings)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "BotConfig":
        users = data.get("target_users") or []
        if not isinstance(users, list) or not users:
            raise ConfigError("config.yaml needs a non-empty 'target_users' list")

        initial_buy = data.get("initial_buy") or {}
        token = data.get("token") or {}
        ai = data.get("ai") or {}
        mock = data.get("mock")
        vanity = data.get("vanity") or {}
        max_iterations = vanity.get("max_iterations", DEFAULT_MAX_ITERATIONS)

        return BotConfig(
            target_users=[str(u).lstrip("@") for u in users],
            initial_buy_solana=float(initial_buy.get("solana", 0.001)),
            initial_buy_bsc=float(initial_buy.get("bsc", 0.0001)),
            auto_sell_pumpfun=bool(token.get("auto_sell_pumpfun", False)),
            temperature=float(ai.get("temperature", 0.7)),
            mock=MockTweet(**mock) if mock else None,
            vanity=VanitySettings(
                suffix=str(vanity.get("suffix", VANITY_SUFFIX)),
                max_iterations=int(max_iterations) if max_iterations else None,
                workers=int(vanity.get("workers", 1)),
            ),
        )


_cached_config: Optional[BotConfig] = None


def load_config(path: Optional[str] = None) -> BotConfig:
    """Read config.yaml (cwd by default) once and keep it for the process."""
    global _cached_config
    if _cached_config is not None and path is None:
        return _cached_config

    config_path = path or os.path.join(os.getcwd(), "config.yaml")
    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found at: {config_path}")

    with open(config_path, "r", encoding="utf-8") as file:
        data = yaml.safe_load(file) or {}

    _cached_config = BotConfig.from_dict(data)
    return _cached_config


def get_config() -> BotConfig:
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    global _cached_config
    _cached_config = None
