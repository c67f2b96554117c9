"""
Network-wide parameters for the launch bot.

The portal and implementation addresses define where Flap deploys token
clones. Changing them changes every predicted vanity address.
"""

# Flap portal on BSC (the CREATE2 deployer)
FLAP_PORTAL_ADDRESS = "0xe2cE6ab80874Fa9Fa2aAE65D277Dd6B8e65C9De0"

# Implementation cloned for non-tax tokens, those must end in 8888
NON_TAX_TOKEN_IMPL = "0x8B4329947e34B6d56D71A3385caC122BaDe7d78D"
VANITY_SUFFIX = "8888"

# EIP-1167 minimal proxy creation code, implementation goes in between
MINIMAL_PROXY_PREFIX = bytes.fromhex("3d602d80600a3d3981f3363d3d373d3d3d363d73")
MINIMAL_PROXY_SUFFIX = bytes.fromhex("5af43d82803e903d91602b57fd5bf3")

# 16^4 = 65536 expected candidates for "8888", so ~30x headroom
DEFAULT_MAX_ITERATIONS = 2_000_000

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ZERO_BYTES32 = bytes(32)

BSC_RPC_URL = "https://bsc-dataseed1.binance.org"
SOLANA_RPC_URL = "https://api.mainnet-beta.solana.com"

X_API_URL = "https://api.twitter.com/2"
PINATA_API_URL = "https://api.pinata.cloud"
PINATA_GATEWAY_URL = "https://gateway.pinata.cloud/ipfs"
PUMPFUN_IPFS_URL = "https://pump.fun/api/ipfs"
PUMPPORTAL_TRADE_URL = "https://pumpportal.fun/api/trade-local"

PUMP_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"

GROQ_MODEL = "llama-3.3-70b-versatile"

BSCSCAN_URL = "https://bscscan.com"
SOLSCAN_URL = "https://solscan.io"
FLAP_URL = "https://flap.sh/bsc"
PUMPFUN_URL = "https://pump.fun"
