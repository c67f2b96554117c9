from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from texttable import Texttable

from utils.cache import cache_launch_details, cache_processed_tweet, is_tweet_processed
from utils.log import log

from .ai import TokenMetadata
from .constants import BSCSCAN_URL, FLAP_URL, PUMPFUN_URL, SOLSCAN_URL
from .flap import FlapLaunch
from .images import is_remote
from .pumpfun import PumpLaunch
from .tweets import Tweet


@dataclass
class LaunchResult:
    tweet: Tweet
    metadata: TokenMetadata
    image: str
    pump: Optional[PumpLaunch] = None
    flap: Optional[FlapLaunch] = None

    def to_dict(self):
        return {
            "tweet_url": self.tweet.url,
            "user": self.tweet.user,
            "name": self.metadata.name,
            "symbol": self.metadata.symbol,
            "keyword": self.metadata.keyword,
            "image": self.image,
            "solana_mint": self.pump.mint if self.pump else None,
            "solana_signature": self.pump.signature if self.pump else None,
            "bsc_token": self.flap.token_address if self.flap else None,
            "bsc_tx": self.flap.tx_hash if self.flap else None,
            "launched_at_utc": datetime.now(timezone.utc).isoformat(),
        }


def summary_table(results: List[LaunchResult]) -> str:
    table = Texttable(max_width=0)
    table.header(["Symbol", "Chain", "Token", "Link"])
    table.set_cols_align(["l", "l", "l", "l"])
    table.set_deco(Texttable.HEADER)
    for r in results:
        if r.pump:
            table.add_row(
                [r.metadata.symbol, "Solana", r.pump.mint, f"{PUMPFUN_URL}/{r.pump.mint}"]
            )
        if r.flap:
            table.add_row(
                [
                    r.metadata.symbol,
                    "BSC",
                    r.flap.token_address,
                    f"{FLAP_URL}/{r.flap.token_address}",
                ]
            )
    return table.draw()


class Launcher:
    def __init__(self, config, monitor, ai, images, flap, pumpfun):
        self.config = config
        self.monitor = monitor
        self.ai = ai
        self.images = images
        self.flap = flap
        self.pumpfun = pumpfun

    def choose_image(self, tweet: Tweet) -> Optional[str]:
        """Tweet media first, otherwise a random picture from the local pool"""
        if tweet.image_url:
            log(f"Using image from tweet: {tweet.image_url}")
            return tweet.image_url
        image = self.images.random_image()
        if image is None:
            return None
        log(f"Using local image: {image.file_name}")
        return image.path

    def launch_pumpfun(self, metadata: TokenMetadata, image: str, tweet: Tweet, description: str):
        remote = is_remote(image)
        return self.pumpfun.create_token(
            name=metadata.name,
            symbol=metadata.symbol,
            description=description,
            image_file=None if remote else image,
            image_url=image if remote else None,
            twitter=tweet.url,
            initial_buy=self.config.initial_buy_solana,
        )

    def launch_flap(self, metadata: TokenMetadata, image: str, tweet: Tweet, description: str):
        return self.flap.create_token(
            metadata.name,
            metadata.symbol,
            image,
            tweet_url=tweet.url,
            description=description,
            initial_buy=str(self.config.initial_buy_bsc),
        )

    def on_tweet(self, tweet: Tweet) -> Optional[LaunchResult]:
        if is_tweet_processed(tweet.key):
            log(f"Tweet {tweet.key} already processed, skipping")
            return None

        metadata = self.ai.generate_token_metadata(tweet.text, tweet.user)
        if metadata is None:
            return None

        image = self.choose_image(tweet)
        if image is None:
            log(f"No image available for ${metadata.symbol}, skipping launch")
            return None

        description = f"{metadata.name} - {metadata.keyword}"
        result = LaunchResult(tweet, metadata, image)

        log("Deploying on Solana & BSC...")
        with ThreadPoolExecutor(max_workers=2) as executor:
            future_to_chain = {
                executor.submit(
                    self.launch_pumpfun, metadata, image, tweet, description
                ): "solana",
                executor.submit(
                    self.launch_flap, metadata, image, tweet, description
                ): "bsc",
            }
            for future in as_completed(future_to_chain):
                chain = future_to_chain[future]
                try:
                    launched = future.result()
                except Exception as exc:
                    log(f"Launch on {chain} failed: {exc}")
                    continue
                if chain == "solana":
                    result.pump = launched
                else:
                    result.flap = launched

        # cached before any post-launch step
        cache_processed_tweet(tweet.key, {"symbol": metadata.symbol, "user": tweet.user})
        if result.pump or result.flap:
            cache_launch_details(metadata.symbol, result.to_dict())

        if result.pump:
            log(f"Solscan: {SOLSCAN_URL}/token/{result.pump.mint}")
        if result.flap:
            log(f"BSCScan: {BSCSCAN_URL}/tx/{result.flap.tx_hash}")
        if result.pump or result.flap:
            print(summary_table([result]))
            print()

        if result.pump and self.config.auto_sell_pumpfun:
            try:
                self.pumpfun.sell_all_tokens(result.pump.mint)
            except Exception as exc:
                log(f"Auto-sell of {result.pump.mint} failed: {exc}")
        return result

    def run_once(self) -> List[LaunchResult]:
        """Fetch the latest tweet of every target account and launch on each"""
        results: List[LaunchResult] = []

        def callback(tweet):
            result = self.on_tweet(tweet)
            if result is not None:
                results.append(result)

        self.monitor.start_monitoring(callback)
        return results
