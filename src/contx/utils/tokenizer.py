# src/contx/utils/tokenizer.py
from functools import lru_cache

import tiktoken

from contx.config import MODEL_INPUT_PRICES
from contx.exceptions import CostEstimationError
from contx.models import CostEstimate

FALLBACK_ENCODING = "cl100k_base"


class Tokenizer:
    @staticmethod
    @lru_cache(maxsize=None)
    def get_encoding(model: str):
        """
        Encoding for an OpenAI model name; other vendors' models get cl100k_base
        as an approximation. Encoding files are downloaded on first use.
        """
        try:
            return tiktoken.encoding_for_model(model)
        except KeyError:
            return tiktoken.get_encoding(FALLBACK_ENCODING)

    @staticmethod
    def count(text: str, model: str) -> int:
        encoding = Tokenizer.get_encoding(model)
        return len(encoding.encode(text, disallowed_special=()))


def estimate_cost(model: str, text: str) -> CostEstimate:
    """Token count and input cost (USD) of sending text to model."""
    if model not in MODEL_INPUT_PRICES:
        raise CostEstimationError(f"No pricing known for model '{model}'")
    try:
        tokens = Tokenizer.count(text, model)
    except Exception as e:
        # Network failures while fetching encodings surface as assorted errors
        raise CostEstimationError(f"Token counting failed for '{model}': {e}") from e
    return CostEstimate(token_count=tokens, cost_usd=tokens * MODEL_INPUT_PRICES[model] / 1_000_000)
