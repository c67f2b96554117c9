from unittest.mock import MagicMock

import pytest
from web3 import Web3

from launcher import flap as flap_module
from launcher.config import VanitySettings
from launcher.constants import FLAP_PORTAL_ADDRESS, NON_TAX_TOKEN_IMPL
from launcher.flap import FlapLaunch, FlapPortal, NewTokenParams, to_wei
from launcher.vanity import minimal_proxy_bytecode, predict_create2_address

PRIVATE_KEY = "0x" + "11" * 32
TOKEN = "0x3333333333333333333333333333333333338888"
TX_HASH = b"\x12" * 32


@pytest.fixture
def images():
    images = MagicMock()
    images.upload_flap_metadata.return_value = "QmMeta"
    return images


@pytest.fixture
def portal(images):
    web3 = MagicMock()
    portal = FlapPortal(web3, PRIVATE_KEY, images, vanity=VanitySettings(suffix="8"))
    portal.contract.events.TokenCreated.return_value.process_receipt.return_value = [
        {"args": {"token": TOKEN}}
    ]
    return portal


@pytest.fixture
def executed(monkeypatch):
    calls = []

    def fake_execute(web3, account, fnct, value=0, max_gwei=None, timeout=180):
        calls.append((fnct, value))
        return {"status": 1, "transactionHash": TX_HASH}

    monkeypatch.setattr(flap_module, "execute_transaction", fake_execute)
    return calls


def test_new_token_params_order():
    params = NewTokenParams("Moon", "MOON", "QmMeta", b"\x01" * 32, 10, "0xabc")
    values = params.to_tuple()
    assert len(values) == 22
    assert values[:6] == ("Moon", "MOON", "QmMeta", 1, b"\x01" * 32, 0)
    assert values[8:10] == (10, "0xabc")


def test_to_wei():
    assert to_wei("0.0001") == 10**14
    assert to_wei(0.0001) == 10**14


def test_create_token(portal, images, executed):
    launch = portal.create_token(
        "Moon", "MOON", "https://pbs.twimg.com/a.jpg", tweet_url="https://x.com/u/status/1"
    )

    assert launch == FlapLaunch(TOKEN, Web3.to_hex(TX_HASH), launch.predicted_address)
    assert launch.predicted_address.lower().endswith("8")
    images.upload_flap_metadata.assert_called_once_with(
        "https://pbs.twimg.com/a.jpg",
        "Moon",
        "MOON",
        "Moon - Inspired by trending topics",
        "https://x.com/u/status/1",
    )

    (params,) = portal.contract.functions.newTokenV5.call_args.args
    assert params[2] == "QmMeta"
    assert params[8] == 10**14
    assert params[9] == portal.account.address
    assert predict_create2_address(
        FLAP_PORTAL_ADDRESS, params[4], minimal_proxy_bytecode(NON_TAX_TOKEN_IMPL)
    ) == launch.predicted_address
    assert executed[0][1] == 10**14


def test_create_token_metadata_failure(portal, images, executed):
    images.upload_flap_metadata.return_value = None

    with pytest.raises(RuntimeError, match="metadata"):
        portal.create_token("Moon", "MOON", "a.jpg")
    assert executed == []


def test_create_token_without_event(portal, executed):
    portal.contract.events.TokenCreated.return_value.process_receipt.return_value = []

    with pytest.raises(RuntimeError, match="Token address"):
        portal.create_token("Moon", "MOON", "a.jpg")


def test_sell_all_without_balance(portal, executed):
    portal.web3.eth.contract.return_value.functions.balanceOf.return_value.call.return_value = 0

    assert portal.sell_all_tokens(TOKEN) is None
    assert executed == []


def test_sell_all_approves_then_sells(portal, executed):
    portal.web3.eth.contract.return_value.functions.balanceOf.return_value.call.return_value = 500

    assert portal.sell_all_tokens(TOKEN) == Web3.to_hex(TX_HASH)
    assert len(executed) == 2
    portal.web3.eth.contract.return_value.functions.approve.assert_called_once_with(
        portal.address, 500
    )


def test_buy_tokens(portal, executed):
    portal.buy_tokens(TOKEN, "0.01")
    portal.contract.functions.buy.assert_called_once_with(
        Web3.to_checksum_address(TOKEN), portal.account.address, 0
    )
    assert executed[0][1] == 10**16
