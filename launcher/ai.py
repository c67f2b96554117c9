import json
import re
from dataclasses import dataclass
from typing import Optional

from groq import Groq

from utils.log import log

from .constants import GROQ_MODEL

CHINESE_PATTERN = re.compile("[一-龥]")

SYSTEM_PROMPT = """You are a meme token creator. Read the tweet and find its main focus
(emojis often carry it). Answer with a token concept.

- symbol: {symbol_rule}
- name: {name_rule}
- keyword: the single most powerful word of the concept, {keyword_rule}

OUTPUT STRICT JSON ONLY:
{{"name": "...", "symbol": "...", "keyword": "..."}}
"""

ENGLISH_RULES = {
    "symbol_rule": "3-5 uppercase letters, catchy and meme-worthy",
    "name_rule": "1-3 English words, the key phrase of the tweet",
    "keyword_rule": "in English",
}

CHINESE_RULES = {
    "symbol_rule": "2-4 Chinese characters, catchy and meme-worthy",
    "name_rule": "1-3 words kept in Chinese characters",
    "keyword_rule": "kept in Chinese",
}


@dataclass(frozen=True)
class TokenMetadata:
    name: str
    symbol: str
    keyword: str


def has_chinese(text: str) -> bool:
    return CHINESE_PATTERN.search(text) is not None


class AIService:
    def __init__(self, api_key: str, temperature: float = 0.7, client=None):
        self.temperature = temperature
        self.client = client or Groq(api_key=api_key)

    def generate_token_metadata(
        self, tweet_text: str, author: str
    ) -> Optional[TokenMetadata]:
        """Name/symbol/keyword for a tweet, None when the model gives nothing usable"""
        log(f'Processing tweet via Groq: "{tweet_text[:30]}..."')
        chinese = has_chinese(tweet_text)
        rules = CHINESE_RULES if chinese else ENGLISH_RULES

        try:
            completion = self.client.chat.completions.create(
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT.format(**rules)},
                    {"role": "user", "content": f"Tweet by {author}: {tweet_text}"},
                ],
                model=GROQ_MODEL,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                max_tokens=50,
            )
        except Exception as exc:
            log(f"AI generation failed: {exc}")
            return None

        if not completion.choices:
            return None
        content = completion.choices[0].message.content
        if not content:
            return None

        try:
            result = json.loads(content)
            name, symbol, keyword = (
                str(result[key]) for key in ("name", "symbol", "keyword")
            )
        except (ValueError, KeyError, TypeError) as exc:
            log(f"AI returned an unusable answer: {exc}")
            return None

        log(f'AI generated: ${symbol} ("{name}")')
        if chinese:
            return TokenMetadata(name=name, symbol=symbol, keyword=keyword)
        return TokenMetadata(name=name.upper(), symbol=symbol.upper(), keyword=keyword)
