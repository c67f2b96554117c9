import json
import os

current_dir = os.path.dirname(os.path.abspath(__file__))

tweet_cache_file_path = os.path.join(current_dir, "..", "data", "tweet_cache.json")
launch_cache_file_path = os.path.join(current_dir, "..", "data", "launch_cache.json")


def _load(path):
    try:
        with open(path, "r") as file:
            return json.load(file)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save(path, cache):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as file:
        json.dump(cache, file, indent=2)


def load_tweet_cache():
    return _load(tweet_cache_file_path)


def load_launch_cache():
    return _load(launch_cache_file_path)


def is_tweet_processed(key):
    return key in load_tweet_cache()


def cache_processed_tweet(key, details):
    cache = load_tweet_cache()
    cache[key] = details
    _save(tweet_cache_file_path, cache)


def get_launch_details(symbol):
    cache = load_launch_cache()
    return cache.get(symbol)


def cache_launch_details(symbol, details):
    cache = load_launch_cache()
    cache.setdefault(symbol, []).append(details)
    _save(launch_cache_file_path, cache)
