from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, List, Optional

import requests

from utils.log import log

from .config import MockTweet
from .constants import X_API_URL


class CreditsDepleted(Exception):
    pass


@dataclass(frozen=True)
class Tweet:
    text: str
    user: str
    url: Optional[str] = None
    image_url: Optional[str] = None
    is_video: bool = False
    id: Optional[str] = None

    @property
    def key(self) -> str:
        """Identity used by the processed-tweets cache."""
        return self.id or self.url or f"{self.user}:{self.text}"


def media_image_url(media: dict):
    """Returns (image url, is_video) for an X media object."""
    kind = media.get("type")
    if kind == "photo" and media.get("url"):
        return media["url"], False
    if kind in ("video", "animated_gif") and media.get("preview_image_url"):
        return media["preview_image_url"], True
    return None, False


class XMonitor:
    def __init__(
        self,
        bearer_token: str,
        target_users: List[str],
        mock: Optional[MockTweet] = None,
        timeout: float = 10.0,
    ):
        self.target_users = target_users
        self.mock = mock
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {bearer_token}"})

    def _get(self, path: str, params: Optional[dict] = None) -> dict:
        response = self.session.get(
            f"{X_API_URL}{path}", params=params, timeout=self.timeout
        )
        if response.status_code == 402:
            raise CreditsDepleted(path)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if isinstance(data, dict) and data.get("title") == "CreditsDepleted":
            raise CreditsDepleted(path)
        response.raise_for_status()
        return data

    def user_id(self, username: str) -> Optional[str]:
        data = self._get(f"/users/by/username/{username}")
        user = data.get("data")
        if not user:
            return None
        return user["id"]

    def fetch_latest_tweet(self, username: str) -> Optional[Tweet]:
        log(f"Fetching latest tweet from @{username}...")
        user_id = self.user_id(username)
        if user_id is None:
            log(f"User {username} not found")
            return None

        timeline = self._get(
            f"/users/{user_id}/tweets",
            params={
                "max_results": 5,
                "tweet.fields": "created_at",
                "expansions": "attachments.media_keys",
                "media.fields": "url,preview_image_url,type",
            },
        )
        tweets = timeline.get("data") or []
        if not tweets:
            log(f"No latest tweet found for @{username}")
            return None

        latest = tweets[0]
        image_url, is_video = None, False
        # includes.media covers the whole page, keep only the latest tweet's
        media_keys = (latest.get("attachments") or {}).get("media_keys") or []
        media = {
            m.get("media_key"): m
            for m in (timeline.get("includes") or {}).get("media") or []
        }
        for key in media_keys:
            if key in media:
                image_url, is_video = media_image_url(media[key])
                break

        log(f"Latest tweet from @{username}: {latest['text'][:100]}")
        return Tweet(
            text=latest["text"],
            user=username,
            url=f"https://x.com/{username}/status/{latest['id']}",
            image_url=image_url,
            is_video=is_video,
            id=str(latest["id"]),
        )

    def mock_tweet(self) -> Optional[Tweet]:
        if self.mock is None or not self.mock.tweet_text:
            return None
        return Tweet(
            text=self.mock.tweet_text,
            user=self.mock.user,
            url=self.mock.tweet_url or None,
        )

    def start_monitoring(self, callback: Callable[[Tweet], object]) -> List[Tweet]:
        """
        Fetch the latest tweet of every target user in parallel. Each tweet is
        passed to `callback` as soon as it arrives; returns once every
        callback finished.
        """
        log(f"Target accounts: {', '.join(self.target_users)}")
        processed: List[Tweet] = []
        credits_depleted = False

        def fetch_and_process(username):
            tweet = self.fetch_latest_tweet(username)
            if tweet is not None:
                callback(tweet)
            return tweet

        with ThreadPoolExecutor(max_workers=max(1, len(self.target_users))) as executor:
            future_to_user = {
                executor.submit(fetch_and_process, u): u for u in self.target_users
            }
            for future in as_completed(future_to_user):
                username = future_to_user[future]
                try:
                    tweet = future.result()
                except CreditsDepleted:
                    log(f"Twitter API credits depleted for @{username}")
                    credits_depleted = True
                    continue
                except Exception as exc:
                    log(f"Error processing latest tweet for @{username}: {exc}")
                    continue
                if tweet is not None:
                    processed.append(tweet)

        if credits_depleted and not processed:
            tweet = self.mock_tweet()
            if tweet is not None:
                log(f"Using mock data, tweet from @{tweet.user}")
                callback(tweet)
                processed.append(tweet)
        elif not processed:
            log("No latest tweets found from any target users")

        return processed
