# Vanity salt for a Flap token clone
#
#   predicted = keccak256(0xff ++ portal ++ salt ++ keccak256(eip1167(impl)))[12:]
#
# python salt.py --suffix 8888 --workers 4

import argparse
import time

from texttable import Texttable

from launcher.constants import (
    DEFAULT_MAX_ITERATIONS,
    FLAP_PORTAL_ADDRESS,
    NON_TAX_TOKEN_IMPL,
    VANITY_SUFFIX,
)
from launcher.vanity import (
    VanitySearchExhausted,
    find_vanity_salt,
    find_vanity_salt_parallel,
    minimal_proxy_bytecode,
    predict_create2_address,
)


def build_parser():
    p = argparse.ArgumentParser(
        prog="salt", description="Find a CREATE2 salt for a vanity token address."
    )
    p.add_argument("--suffix", default=VANITY_SUFFIX, help="Hex suffix to match.")
    p.add_argument("--deployer", default=FLAP_PORTAL_ADDRESS, help="CREATE2 deployer.")
    p.add_argument(
        "--implementation", default=NON_TAX_TOKEN_IMPL, help="Cloned implementation."
    )
    p.add_argument("--workers", type=int, default=1, help="Search processes.")
    p.add_argument(
        "--max-iterations",
        type=int,
        default=DEFAULT_MAX_ITERATIONS,
        help="Give up after this many rejected salts (0 = no cap).",
    )
    p.add_argument("--seed", default=None, help="Hex seed, single worker only.")
    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.seed and args.workers > 1:
        parser.error("--seed only applies to a single worker")
    max_iterations = args.max_iterations or None

    start = time.time()
    try:
        if args.workers > 1:
            result = find_vanity_salt_parallel(
                args.deployer,
                args.implementation,
                args.suffix,
                workers=args.workers,
                max_iterations=max_iterations,
            )
        else:
            seed = bytes.fromhex(args.seed.removeprefix("0x")) if args.seed else None
            result = find_vanity_salt(
                args.deployer,
                args.implementation,
                args.suffix,
                max_iterations=max_iterations,
                seed=seed,
            )
    except VanitySearchExhausted as exc:
        raise SystemExit(str(exc))
    duration = time.time() - start

    # recompute to show the address is independent from the search
    check = predict_create2_address(
        args.deployer, result.salt, minimal_proxy_bytecode(args.implementation)
    )

    table = Texttable(max_width=0)
    table.set_deco(Texttable.HEADER)
    table.header(["", ""])
    table.set_cols_align(["l", "l"])
    table.add_row(["Deployer", args.deployer])
    table.add_row(["Implementation", args.implementation])
    table.add_row(["Salt", result.salt_hex])
    table.add_row(["Address", result.address])
    table.add_row(["Verified", "yes" if check == result.address else "NO"])
    table.add_row(["Iterations", f"{result.iterations:,}"])
    table.add_row(["Speed", f"{result.iterations / max(duration, 1e-9):,.0f} it/s"])
    print(table.draw())


if __name__ == "__main__":
    main()
