import dataclasses

import pytest

from config.bot_config import ConfigurationError, EntryConfig, ExitConfig, require_credentials

CREDENTIAL_VARS = (
    "BINANCE_TEST_API_KEY",
    "BINANCE_TEST_API_SECRET",
    "BINANCE_API_KEY",
    "BINANCE_API_SECRET",
    "API_KEY",
    "API_SECRET",
)


@pytest.fixture
def no_credentials(monkeypatch):
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_entry_defaults():
    config = EntryConfig.from_settings()
    assert config.max_positions == 1
    assert config.sell_threshold == 80.0
    assert config.buy_threshold == 10.0
    assert config.price_ceiling == 1.0
    assert (config.position_usdt, config.leverage) == (5.0, 3)
    assert "USDCUSDT" in config.excluded_symbols


def test_exit_defaults():
    config = ExitConfig.from_settings()
    assert config.profit_ratio == 0.03
    assert config.margin_top_up_enabled is False
    assert config.reduce_only is False


def test_configs_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        EntryConfig().max_positions = 2


def test_missing_credentials_is_fatal(no_credentials):
    with pytest.raises(ConfigurationError):
        require_credentials(testnet=False)


def test_testnet_keys_take_precedence(no_credentials):
    no_credentials.setenv("BINANCE_TEST_API_KEY", "tk")
    no_credentials.setenv("BINANCE_TEST_API_SECRET", "ts")
    no_credentials.setenv("BINANCE_API_KEY", "k")
    no_credentials.setenv("BINANCE_API_SECRET", "s")
    assert require_credentials(testnet=True) == ("tk", "ts")
    assert require_credentials(testnet=False) == ("k", "s")


def test_legacy_variable_names_accepted(no_credentials):
    no_credentials.setenv("API_KEY", "k")
    no_credentials.setenv("API_SECRET", "s")
    assert require_credentials(testnet=False) == ("k", "s")
