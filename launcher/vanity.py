"""
CREATE2 vanity salts for minimal-proxy token clones.

The portal deploys every token as an EIP-1167 clone with CREATE2, so the token
address is known before the transaction is sent:

    address = keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]

A search starts from keccak256(random seed) and re-hashes the salt until the
predicted address ends with the wanted hex suffix.
"""

import multiprocessing
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from eth_utils import keccak, to_canonical_address
from web3 import Web3

from .constants import (
    DEFAULT_MAX_ITERATIONS,
    MINIMAL_PROXY_PREFIX,
    MINIMAL_PROXY_SUFFIX,
)

Address = Union[str, bytes]

FF_PREFIX = b"\xff"
HEX_DIGITS = set("0123456789abcdef")
DEFAULT_CHUNK_SIZE = 50_000


class VanitySearchExhausted(Exception):
    """
    Raised when the iteration cap is hit before any address matched.

    `iterations` is the number of salts actually rejected, which is past the cap.
    """

    def __init__(self, suffix: str, iterations: int):
        super().__init__(
            f"No address ending in '{suffix}' after {iterations:,} iterations"
        )
        self.suffix = suffix
        self.iterations = iterations


@dataclass(frozen=True)
class VanityResult:
    salt: bytes
    address: str
    iterations: int

    @property
    def salt_hex(self) -> str:
        return "0x" + self.salt.hex()


def minimal_proxy_bytecode(implementation: Address) -> bytes:
    """EIP-1167 creation code for a clone forwarding to `implementation`."""
    return MINIMAL_PROXY_PREFIX + to_canonical_address(implementation) + MINIMAL_PROXY_SUFFIX


def create2_address(deployer: bytes, salt: bytes, init_code_hash: bytes) -> bytes:
    """
    Raw 20-byte CREATE2 address.

    Args:
        deployer: 20-byte address executing CREATE2
        salt: 32-byte salt
        init_code_hash: keccak256 of the creation code

    Raises:
        ValueError: on any length mismatch
    """
    if len(deployer) != 20:
        raise ValueError(f"Deployer must be 20 bytes, got {len(deployer)}")
    if len(salt) != 32:
        raise ValueError(f"Salt must be 32 bytes, got {len(salt)}")
    if len(init_code_hash) != 32:
        raise ValueError(f"Init code hash must be 32 bytes, got {len(init_code_hash)}")
    return keccak(FF_PREFIX + deployer + salt + init_code_hash)[12:]


def predict_create2_address(deployer: Address, salt: bytes, bytecode: bytes) -> str:
    """Checksummed address the deployer will get for `bytecode` with `salt`."""
    address = create2_address(to_canonical_address(deployer), salt, keccak(bytecode))
    return Web3.to_checksum_address(address)


def normalize_suffix(suffix: str) -> str:
    suffix = suffix.lower()
    if suffix.startswith("0x"):
        suffix = suffix[2:]
    if len(suffix) > 40:
        raise ValueError(f"Suffix longer than an address: {len(suffix)} > 40")
    if not set(suffix) <= HEX_DIGITS:
        raise ValueError(f"Suffix must be hexadecimal, got '{suffix}'")
    return suffix


def _search_chunk(
    args: Tuple[bytes, bytes, str, bytes, int]
) -> Tuple[bool, bytes, int]:
    """
    Walk `count` links of a salt chain.

    Returns (True, matching salt, rejected count) on a hit, otherwise
    (False, next salt to try, count).
    """
    deployer, init_code_hash, suffix, salt, count = args
    prefix = FF_PREFIX + deployer
    for checked in range(count):
        if keccak(prefix + salt + init_code_hash)[12:].hex().endswith(suffix):
            return True, salt, checked
        salt = keccak(salt)
    return False, salt, count


def find_vanity_salt(
    deployer: Address,
    implementation: Address,
    suffix: str,
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS,
    seed: Optional[bytes] = None,
) -> VanityResult:
    """
    Find a salt whose clone address ends with `suffix`.

    `max_iterations` bounds the number of rejected salts (None means no cap).
    `seed` fixes the starting point, a random 32-byte seed is used otherwise.
    """
    suffix = normalize_suffix(suffix)
    deployer_bytes = to_canonical_address(deployer)
    init_code_hash = keccak(minimal_proxy_bytecode(implementation))
    salt = keccak(seed if seed is not None else os.urandom(32))

    iterations = 0
    while True:
        count = DEFAULT_CHUNK_SIZE
        if max_iterations is not None:
            # +1 so the salt sitting exactly on the cap is still checked
            count = min(count, max_iterations - iterations + 1)
        found, salt, checked = _search_chunk(
            (deployer_bytes, init_code_hash, suffix, salt, count)
        )
        iterations += checked
        if found:
            address = create2_address(deployer_bytes, salt, init_code_hash)
            return VanityResult(salt, Web3.to_checksum_address(address), iterations)
        if max_iterations is not None and iterations > max_iterations:
            raise VanitySearchExhausted(suffix, iterations)


def find_vanity_salt_parallel(
    deployer: Address,
    implementation: Address,
    suffix: str,
    workers: Optional[int] = None,
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> VanityResult:
    """
    Same search spread over a process pool.

    Every worker owns its own salt chain from its own random seed. Chunks are
    dispatched in rounds; the first hit wins and the iteration budget is
    shared by all chains (checked between rounds).
    """
    if workers is None:
        workers = multiprocessing.cpu_count()
    if workers <= 1:
        return find_vanity_salt(deployer, implementation, suffix, max_iterations)

    suffix = normalize_suffix(suffix)
    deployer_bytes = to_canonical_address(deployer)
    init_code_hash = keccak(minimal_proxy_bytecode(implementation))
    salts = [keccak(os.urandom(32)) for _ in range(workers)]

    iterations = 0
    with ProcessPoolExecutor(max_workers=workers) as executor:
        while True:
            count = chunk_size
            if max_iterations is not None:
                remaining = max_iterations - iterations
                if remaining < 0:
                    raise VanitySearchExhausted(suffix, iterations)
                count = max(1, min(chunk_size, remaining // workers + 1))

            futures = {
                executor.submit(
                    _search_chunk,
                    (deployer_bytes, init_code_hash, suffix, salt, count),
                ): index
                for index, salt in enumerate(salts)
            }
            hits = []
            for future in as_completed(futures):
                index = futures[future]
                found, salt, checked = future.result()
                iterations += checked
                if found:
                    hits.append((index, salt))
                else:
                    salts[index] = salt

            if hits:
                _, salt = min(hits)
                address = create2_address(deployer_bytes, salt, init_code_hash)
                return VanityResult(
                    salt, Web3.to_checksum_address(address), iterations
                )
