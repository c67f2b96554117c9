from web3 import Web3

from utils.log import log


class GasPriceTooHigh(Exception):
    pass


class TransactionFailed(Exception):
    pass


def execute_transaction(web3, account, fnct, value=0, max_gwei=None, timeout=180):
    """
    Sign and send a contract call from `account`, then wait for the receipt.

    Refuses to send when the node's gas price is above `max_gwei`.
    """
    tx = fnct.build_transaction(
        {
            "from": account.address,
            "value": value,
            "nonce": web3.eth.get_transaction_count(account.address),
        }
    )

    gas_price = web3.eth.generate_gas_price() or web3.eth.gas_price
    log(f"gas prices => {gas_price/pow(10,9):,.2f}")
    if max_gwei is not None and gas_price > Web3.to_wei(max_gwei, "gwei"):
        raise GasPriceTooHigh(f"gas price too high => {gas_price/pow(10,9):,.2f}")

    signed_transaction = account.sign_transaction(tx)
    tx_hash = web3.eth.send_raw_transaction(signed_transaction.raw_transaction)
    log(f"Executed with hash => {Web3.to_hex(tx_hash)}")

    receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    if receipt["status"] != 1:
        raise TransactionFailed(f"Transaction reverted: {Web3.to_hex(tx_hash)}")
    return receipt
