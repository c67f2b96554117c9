from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests
from solders.commitment_config import CommitmentLevel
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.rpc.config import RpcSendTransactionConfig
from solders.rpc.requests import SendVersionedTransaction
from solders.transaction import VersionedTransaction

from utils.log import log

from .constants import (
    PUMP_PROGRAM_ID,
    PUMPFUN_IPFS_URL,
    PUMPPORTAL_TRADE_URL,
    SOLSCAN_URL,
)
from .images import is_remote

LAMPORTS_PER_SOL = 10**9


@dataclass(frozen=True)
class PumpLaunch:
    mint: str
    signature: str


class PumpFun:
    def __init__(self, rpc_url, private_key=None, session=None, timeout=60.0):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.wallet: Optional[Keypair] = None

        if private_key:
            try:
                self.wallet = Keypair.from_base58_string(private_key)
                log(f"Solana wallet loaded: {self.wallet.pubkey()}")
            except Exception as exc:
                log(f"Failed to load Solana wallet: {exc}")
        else:
            log("No Solana private key found. PumpFun service will not be available.")

    @property
    def enabled(self) -> bool:
        return self.wallet is not None

    def _rpc(self, method: str, params: List[Any]) -> Dict[str, Any]:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        response = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def sign_and_send(self, tx_bytes: bytes, signers: List[Keypair]) -> str:
        """Signs a serialized PumpPortal transaction and broadcasts it"""
        unsigned = VersionedTransaction.from_bytes(tx_bytes)
        tx = VersionedTransaction(unsigned.message, signers)
        config = RpcSendTransactionConfig(preflight_commitment=CommitmentLevel.Confirmed)
        response = self.session.post(
            self.rpc_url,
            headers={"Content-Type": "application/json"},
            data=SendVersionedTransaction(tx, config).to_json(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        data = response.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data["result"]

    def _portal_transaction(self, payload: Dict[str, Any]) -> bytes:
        response = self.session.post(
            PUMPPORTAL_TRADE_URL, json=payload, timeout=self.timeout
        )
        response.raise_for_status()
        return response.content

    def _image_bytes(self, image_file=None, image_url=None) -> bytes:
        if image_file:
            with open(image_file, "rb") as file:
                return file.read()
        if image_url and is_remote(image_url):
            response = self.session.get(image_url, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        if image_url:
            with open(image_url, "rb") as file:
                return file.read()
        raise ValueError("Either image_file or image_url must be provided")

    def upload_metadata(
        self, name, symbol, description, image: bytes, twitter="", telegram="", website=""
    ) -> str:
        """Pins image + metadata on pump.fun's IPFS endpoint, returns the metadata URI"""
        response = self.session.post(
            PUMPFUN_IPFS_URL,
            files={"file": (f"{symbol.lower()}.png", image, "image/png")},
            data={
                "name": name,
                "symbol": symbol,
                "description": description,
                "twitter": twitter or "",
                "telegram": telegram or "",
                "website": website or "",
                "showName": "true",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()["metadataUri"]

    def create_token(
        self,
        name,
        symbol,
        description,
        image_file=None,
        image_url=None,
        twitter=None,
        telegram=None,
        website=None,
        initial_buy=0.001,
    ) -> Optional[PumpLaunch]:
        if not self.enabled:
            log("PumpFun service not initialized. Check your SOLANA_PRIVATE_KEY_BASE58.")
            return None

        log(f"Creating token on pump.fun: {name} / {symbol}, initial buy {initial_buy} SOL")
        try:
            image = self._image_bytes(image_file, image_url)
            uri = self.upload_metadata(
                name, symbol, description, image, twitter, telegram, website
            )
            mint = Keypair()
            tx_bytes = self._portal_transaction(
                {
                    "publicKey": str(self.wallet.pubkey()),
                    "action": "create",
                    "tokenMetadata": {"name": name, "symbol": symbol, "uri": uri},
                    "mint": str(mint.pubkey()),
                    "denominatedInSol": "true",
                    "amount": initial_buy,
                    "slippage": 10,
                    "priorityFee": 0.0005,
                    "pool": "pump",
                }
            )
            signature = self.sign_and_send(tx_bytes, [mint, self.wallet])
        except Exception as exc:
            log(f"Error creating token on pump.fun: {exc}")
            return None

        log(f"Token created on pump.fun: {mint.pubkey()} ({SOLSCAN_URL}/tx/{signature})")
        return PumpLaunch(str(mint.pubkey()), signature)

    def trade(self, action, mint, amount, denominated_in_sol, slippage) -> Optional[str]:
        if not self.enabled:
            log("PumpFun service not initialized.")
            return None
        try:
            tx_bytes = self._portal_transaction(
                {
                    "publicKey": str(self.wallet.pubkey()),
                    "action": action,
                    "mint": mint,
                    "amount": amount,
                    "denominatedInSol": "true" if denominated_in_sol else "false",
                    "slippage": slippage,
                    "priorityFee": 0.0005,
                    "pool": "pump",
                }
            )
            signature = self.sign_and_send(tx_bytes, [self.wallet])
        except Exception as exc:
            log(f"Error on pump.fun {action} of {mint}: {exc}")
            return None
        log(f"pump.fun {action} completed: {signature}")
        return signature

    def buy_token(self, mint, sol_amount) -> Optional[str]:
        return self.trade("buy", mint, sol_amount, True, 1)

    def sell_token(self, mint, amount) -> Optional[str]:
        return self.trade("sell", mint, amount, False, 1)

    def sell_all_tokens(self, mint) -> Optional[str]:
        if self.token_balance(mint) == 0:
            log("No tokens to sell")
            return None
        return self.trade("sell", mint, "100%", False, 10)

    def token_balance(self, mint) -> int:
        """Raw token amount held by the wallet, 0 when it can't be read"""
        if not self.enabled:
            return 0
        try:
            data = self._rpc(
                "getTokenAccountsByOwner",
                [str(self.wallet.pubkey()), {"mint": mint}, {"encoding": "jsonParsed"}],
            )
            accounts = data["result"]["value"]
            if not accounts:
                return 0
            return int(
                accounts[0]["account"]["data"]["parsed"]["info"]["tokenAmount"]["amount"]
            )
        except (requests.RequestException, RuntimeError, KeyError, ValueError) as exc:
            log(f"Error getting token balance of {mint}: {exc}")
            return 0

    def sol_balance(self) -> float:
        if not self.enabled:
            return 0.0
        data = self._rpc("getBalance", [str(self.wallet.pubkey())])
        return data["result"]["value"] / LAMPORTS_PER_SOL

    def bonding_curve_address(self, mint) -> str:
        pda, _ = Pubkey.find_program_address(
            [b"bonding-curve", bytes(Pubkey.from_string(mint))],
            Pubkey.from_string(PUMP_PROGRAM_ID),
        )
        return str(pda)

    def token_info(self, mint) -> Optional[Dict[str, Any]]:
        """Raw bonding-curve account of a pump.fun mint, None if it doesn't exist"""
        data = self._rpc(
            "getAccountInfo", [self.bonding_curve_address(mint), {"encoding": "base64"}]
        )
        return data["result"]["value"]
