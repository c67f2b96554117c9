import pytest

from launcher import config as config_module
from launcher.config import (
    BotConfig,
    ConfigError,
    Env,
    VanitySettings,
    get_env,
    load_config,
    reset_config,
)
from launcher.constants import BSC_RPC_URL, DEFAULT_MAX_ITERATIONS

CONFIG_YAML = """
target_users:
  - "@cz_binance"
  - elonmusk
initial_buy:
  solana: 0.01
  bsc: 0.002
token:
  auto_sell_pumpfun: true
ai:
  temperature: 0.3
mock:
  tweet_text: gm
  user: cz_binance
  tweet_url: https://x.com/cz_binance/status/1
vanity:
  suffix: "8888"
  max_iterations: 500
  workers: 2
"""


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


def test_load_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")

    config = load_config(str(path))

    assert config.target_users == ["cz_binance", "elonmusk"]
    assert config.initial_buy_solana == 0.01
    assert config.initial_buy_bsc == 0.002
    assert config.auto_sell_pumpfun is True
    assert config.temperature == 0.3
    assert config.mock.tweet_text == "gm"
    assert config.vanity == VanitySettings("8888", 500, 2)


def test_load_config_is_cached(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    first = load_config()
    path.write_text("target_users: [someone]", encoding="utf-8")

    assert load_config() is first
    assert config_module.get_config() is first


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize("users", [None, [], "cz_binance"])
def test_target_users_required(users):
    with pytest.raises(ConfigError):
        BotConfig.from_dict({"target_users": users})


def test_defaults():
    config = BotConfig.from_dict({"target_users": ["a"]})
    assert config.initial_buy_solana == 0.001
    assert config.initial_buy_bsc == 0.0001
    assert config.auto_sell_pumpfun is False
    assert config.mock is None
    assert config.vanity.suffix == "8888"
    assert config.vanity.max_iterations == DEFAULT_MAX_ITERATIONS


@pytest.mark.parametrize("value", [0, None])
def test_vanity_cap_can_be_disabled(value):
    config = BotConfig.from_dict(
        {"target_users": ["a"], "vanity": {"max_iterations": value}}
    )
    assert config.vanity.max_iterations is None


def test_get_env(monkeypatch):
    monkeypatch.setenv("SOME_KEY", "  value ")
    monkeypatch.delenv("OTHER_KEY", raising=False)

    assert get_env("SOME_KEY") == "value"
    assert get_env("OTHER_KEY", False, "fallback") == "fallback"
    with pytest.raises(ConfigError):
        get_env("OTHER_KEY")


def test_env_from_environment(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    monkeypatch.setenv("X_BEARER_TOKEN", "bearer")
    monkeypatch.setenv("GROQ_API_KEY", "groq")
    monkeypatch.setenv("BSC_PRIVATE_KEY_HEX", "0x" + "11" * 32)
    monkeypatch.setenv("MAX_GWEI", "3")
    for key in ("BSC_RPC_URL", "PINATA_JWT", "SOLANA_PRIVATE_KEY_BASE58"):
        monkeypatch.delenv(key, raising=False)

    env = Env.from_env()

    assert env.x_bearer_token == "bearer"
    assert env.max_gwei == 3.0
    assert env.bsc_rpc_url == BSC_RPC_URL
    assert env.pinata_jwt == ""
    assert env.solana_private_key == ""


def test_env_missing_required(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    monkeypatch.delenv("X_BEARER_TOKEN", raising=False)
    with pytest.raises(ConfigError, match="X_BEARER_TOKEN"):
        Env.from_env()
