from web3 import Web3
from dotenv import load_dotenv
import sys
import cmd
from texttable import Texttable

from launcher import (
    AIService,
    Env,
    FlapPortal,
    ImageService,
    Launcher,
    PumpFun,
    VanitySearchExhausted,
    XMonitor,
    find_vanity_salt,
    load_config,
    minimal_proxy_bytecode,
    predict_create2_address,
)
from launcher.constants import FLAP_PORTAL_ADDRESS, NON_TAX_TOKEN_IMPL
from utils.cache import load_launch_cache


load_dotenv()


class LauncherCli(cmd.Cmd):
    intro = "Welcome to the launch CLI.   Type help or ? to list commands.\n"
    prompt = ">> "
    launcher = None

    def __init__(self):
        cmd.Cmd.__init__(self)
        self.config = load_config()

    def services(self):
        """Wallets and API clients, only built once a command needs them"""
        if self.launcher is not None:
            return self.launcher

        env = Env.from_env()
        web3 = Web3(Web3.HTTPProvider(env.bsc_rpc_url))
        if not web3.is_connected():
            raise Exception("Issue to connect to Web3")

        images = ImageService(env.pinata_jwt)
        self.launcher = Launcher(
            self.config,
            XMonitor(env.x_bearer_token, self.config.target_users, self.config.mock),
            AIService(env.groq_api_key, self.config.temperature),
            images,
            FlapPortal(
                web3,
                env.bsc_private_key,
                images,
                vanity=self.config.vanity,
                max_gwei=env.max_gwei,
            ),
            PumpFun(env.solana_rpc_url, env.solana_private_key),
        )
        return self.launcher

    def do_vanity(self, suffix):
        """vanity [suffix] - search a salt for the Flap portal"""
        suffix = suffix.strip() or self.config.vanity.suffix
        try:
            result = find_vanity_salt(
                FLAP_PORTAL_ADDRESS,
                NON_TAX_TOKEN_IMPL,
                suffix,
                max_iterations=self.config.vanity.max_iterations,
            )
        except (VanitySearchExhausted, ValueError) as exc:
            print(exc)
            return
        print(f"salt {result.salt_hex} => {result.address} ({result.iterations:,} iterations)")

    def do_predict(self, salt):
        """predict <salt> - clone address for a given salt"""
        if not salt:
            salt = input("Please provide a salt or enter 'q' to go back: ")
            if salt == "q":
                return
        try:
            address = predict_create2_address(
                FLAP_PORTAL_ADDRESS,
                Web3.to_bytes(hexstr=salt.strip()).rjust(32, b"\x00"),
                minimal_proxy_bytecode(NON_TAX_TOKEN_IMPL),
            )
        except ValueError as exc:
            print(f"Invalid salt: {exc}")
            return
        print(address)

    def do_name(self, text):
        """name <text> - ask the model for a token name"""
        metadata = self.services().ai.generate_token_metadata(text, "cli")
        if metadata is None:
            print("No metadata generated")
            return
        print(f"${metadata.symbol} - {metadata.name} ({metadata.keyword})")

    def do_tweets(self, line):
        """tweets - latest tweet of every target account, nothing launched"""
        table = Texttable(max_width=0)
        table.header(["User", "Tweet", "Image"])
        table.set_deco(Texttable.HEADER)
        tweets = self.services().monitor.start_monitoring(lambda tweet: None)
        for tweet in tweets:
            table.add_row([tweet.user, tweet.text[:80], tweet.image_url or ""])
        print(table.draw())
        print()

    def do_balance(self, line):
        launcher = self.services()
        table = Texttable()
        table.header(["Chain", "Address", "Balance"])
        table.set_cols_align(["l", "l", "r"])
        table.set_deco(Texttable.HEADER)
        table.add_row(
            ["BSC", launcher.flap.account.address, f"{launcher.flap.bnb_balance():.4f} BNB"]
        )
        if launcher.pumpfun.enabled:
            table.add_row(
                [
                    "Solana",
                    str(launcher.pumpfun.wallet.pubkey()),
                    f"{launcher.pumpfun.sol_balance():.4f} SOL",
                ]
            )
        print(table.draw())
        print()

    def _chain_args(self, args, count):
        parts = args.split()
        if len(parts) != count or parts[0] not in ("bsc", "sol"):
            print("Expected: <bsc|sol> <token> " + ("<amount>" if count == 3 else ""))
            return None
        return parts

    def do_buy(self, args):
        """buy <bsc|sol> <token> <amount in BNB/SOL>"""
        parts = self._chain_args(args, 3)
        if parts is None:
            return
        chain, token, amount = parts
        launcher = self.services()
        if chain == "bsc":
            print(launcher.flap.buy_tokens(token, amount))
        else:
            print(launcher.pumpfun.buy_token(token, float(amount)))

    def do_sell(self, args):
        """sell <bsc|sol> <token> <amount> (raw units on bsc, tokens on sol)"""
        parts = self._chain_args(args, 3)
        if parts is None:
            return
        chain, token, amount = parts
        launcher = self.services()
        if chain == "bsc":
            print(launcher.flap.sell_tokens(token, int(amount)))
        else:
            print(launcher.pumpfun.sell_token(token, float(amount)))

    def do_sell_all(self, args):
        """sell_all <bsc|sol> <token>"""
        parts = self._chain_args(args, 2)
        if parts is None:
            return
        chain, token = parts
        launcher = self.services()
        if chain == "bsc":
            print(launcher.flap.sell_all_tokens(token))
        else:
            print(launcher.pumpfun.sell_all_tokens(token))

    def do_launch(self, line):
        """launch - fetch the latest tweets and launch on both chains"""
        results = self.services().run_once()
        print(f"{len(results)} launch(es)")

    def do_history(self, line):
        table = Texttable(max_width=0)
        table.header(["Symbol", "Name", "Solana", "BSC", "When"])
        table.set_deco(Texttable.HEADER)
        for symbol, launches in load_launch_cache().items():
            for launch in launches:
                table.add_row(
                    [
                        symbol,
                        launch["name"],
                        launch["solana_mint"] or "",
                        launch["bsc_token"] or "",
                        launch["launched_at_utc"],
                    ]
                )
        print(table.draw())
        print()

    def do_quit(self, line):
        return True


if __name__ == "__main__":
    if len(sys.argv) > 1:
        LauncherCli().onecmd(" ".join(sys.argv[1:]))
    else:
        LauncherCli().cmdloop()
