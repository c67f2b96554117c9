import json
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from web3 import Account, Web3
from web3.gas_strategies.rpc import rpc_gas_price_strategy
from web3.logs import DISCARD

from utils.log import log

from .config import VanitySettings
from .constants import (
    BSCSCAN_URL,
    FLAP_PORTAL_ADDRESS,
    NON_TAX_TOKEN_IMPL,
    ZERO_ADDRESS,
    ZERO_BYTES32,
)
from .transactions import execute_transaction
from .vanity import VanityResult, find_vanity_salt, find_vanity_salt_parallel

current_dir = os.path.dirname(os.path.abspath(__file__))


def load_abi(name):
    with open(os.path.join(current_dir, "abis", f"{name}.json"), "r") as file:
        return json.load(file)


def to_wei(amount) -> int:
    return Web3.to_wei(Decimal(str(amount)), "ether")


@dataclass
class NewTokenParams:
    """Argument struct of the portal's newTokenV5, defaults launch a non-tax token"""

    name: str
    symbol: str
    meta: str
    salt: bytes
    quote_amt: int
    beneficiary: str
    dex_thresh: int = 1  # 80% of supply sold before migrating
    tax_rate: int = 0
    migrator_type: int = 0  # V3 migrator
    quote_token: str = ZERO_ADDRESS  # native BNB
    permit_data: bytes = b""
    extension_id: bytes = ZERO_BYTES32
    extension_data: bytes = b""
    dex_id: int = 0  # PancakeSwap
    lp_fee_profile: int = 0
    tax_duration: int = 0
    anti_farmer_duration: int = 0
    mkt_bps: int = 0
    deflation_bps: int = 0
    dividend_bps: int = 0
    lp_bps: int = 0
    minimum_share_balance: int = 0

    def to_tuple(self):
        return (
            self.name,
            self.symbol,
            self.meta,
            self.dex_thresh,
            self.salt,
            self.tax_rate,
            self.migrator_type,
            self.quote_token,
            self.quote_amt,
            self.beneficiary,
            self.permit_data,
            self.extension_id,
            self.extension_data,
            self.dex_id,
            self.lp_fee_profile,
            self.tax_duration,
            self.anti_farmer_duration,
            self.mkt_bps,
            self.deflation_bps,
            self.dividend_bps,
            self.lp_bps,
            self.minimum_share_balance,
        )


@dataclass(frozen=True)
class FlapLaunch:
    token_address: str
    tx_hash: str
    predicted_address: str


class FlapPortal:
    def __init__(
        self,
        web3,
        private_key,
        images,
        address=FLAP_PORTAL_ADDRESS,
        token_impl=NON_TAX_TOKEN_IMPL,
        vanity: Optional[VanitySettings] = None,
        max_gwei=None,
    ):
        self.web3 = web3
        self.web3.eth.set_gas_price_strategy(rpc_gas_price_strategy)
        self.account = Account.from_key(private_key)
        self.images = images
        self.address = Web3.to_checksum_address(address)
        self.token_impl = Web3.to_checksum_address(token_impl)
        self.vanity = vanity or VanitySettings()
        self.max_gwei = max_gwei
        self.erc20_abi = load_abi("erc20")
        self.contract = web3.eth.contract(
            address=self.address, abi=load_abi("flap_portal")
        )

    def token_contract(self, token):
        return self.web3.eth.contract(
            address=Web3.to_checksum_address(token), abi=self.erc20_abi
        )

    def find_salt(self) -> VanityResult:
        settings = self.vanity
        if settings.workers > 1:
            result = find_vanity_salt_parallel(
                self.address,
                self.token_impl,
                settings.suffix,
                workers=settings.workers,
                max_iterations=settings.max_iterations,
            )
        else:
            result = find_vanity_salt(
                self.address,
                self.token_impl,
                settings.suffix,
                max_iterations=settings.max_iterations,
            )
        log(f"Found vanity address after {result.iterations:,} iterations")
        return result

    def token_from_receipt(self, receipt) -> Optional[str]:
        events = self.contract.events.TokenCreated().process_receipt(
            receipt, errors=DISCARD
        )
        for event in events:
            return event["args"]["token"]
        return None

    def create_token(
        self,
        name,
        symbol,
        image,
        tweet_url=None,
        description=None,
        initial_buy="0.0001",
    ) -> FlapLaunch:
        log(f"Creating token on Flap (BSC): {name} / {symbol}, initial buy {initial_buy} BNB")
        quote_amount = to_wei(initial_buy)

        meta = self.images.upload_flap_metadata(
            image,
            name,
            symbol,
            description or f"{name} - Inspired by trending topics",
            tweet_url,
        )
        if not meta:
            raise RuntimeError("Failed to upload metadata to IPFS")
        log(f"Metadata CID: {meta}")

        vanity = self.find_salt()
        log(f"Predicted token address: {vanity.address}")

        params = NewTokenParams(
            name=name,
            symbol=symbol,
            meta=meta,
            salt=vanity.salt,
            quote_amt=quote_amount,
            beneficiary=self.account.address,
        )
        receipt = execute_transaction(
            self.web3,
            self.account,
            self.contract.functions.newTokenV5(params.to_tuple()),
            value=quote_amount,
            max_gwei=self.max_gwei,
        )
        tx_hash = Web3.to_hex(receipt["transactionHash"])

        token = self.token_from_receipt(receipt)
        if token is None:
            raise RuntimeError("Token address not found in transaction logs")
        if token.lower() != vanity.address.lower():
            log(f"Token {token} differs from predicted {vanity.address}")

        log(f"Token created on Flap: {token} ({BSCSCAN_URL}/tx/{tx_hash})")
        return FlapLaunch(token, tx_hash, vanity.address)

    def buy_tokens(self, token, bnb_amount) -> str:
        log(f"Buying {bnb_amount} BNB worth of {token}...")
        value = to_wei(bnb_amount)
        receipt = execute_transaction(
            self.web3,
            self.account,
            self.contract.functions.buy(
                Web3.to_checksum_address(token), self.account.address, 0
            ),
            value=value,
            max_gwei=self.max_gwei,
        )
        return Web3.to_hex(receipt["transactionHash"])

    def sell_tokens(self, token, amount: int) -> str:
        token = Web3.to_checksum_address(token)
        log(f"Selling {amount} of {token}, approving portal first...")
        execute_transaction(
            self.web3,
            self.account,
            self.token_contract(token).functions.approve(self.address, amount),
            max_gwei=self.max_gwei,
        )
        receipt = execute_transaction(
            self.web3,
            self.account,
            self.contract.functions.sell(token, amount, 0),
            max_gwei=self.max_gwei,
        )
        return Web3.to_hex(receipt["transactionHash"])

    def token_balance(self, token) -> int:
        return self.token_contract(token).functions.balanceOf(self.account.address).call()

    def sell_all_tokens(self, token) -> Optional[str]:
        balance = self.token_balance(token)
        if balance == 0:
            log("No tokens to sell")
            return None
        return self.sell_tokens(token, balance)

    def bnb_balance(self) -> float:
        return float(Web3.from_wei(self.web3.eth.get_balance(self.account.address), "ether"))
