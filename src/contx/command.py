# src/contx/command.py
"""
The "copy to clipboard" action: the only place errors are caught and turned
into user notifications. The host supplies the clipboard and notification
sinks, so this module never touches a real editor or clipboard itself.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from contx.config import MODEL_MAX_TOKENS
from contx.core.pipeline import run_collection
from contx.exceptions import CollectionCancelled
from contx.models import CostEstimate, RunConfiguration, Selection
from contx.utils.tokenizer import estimate_cost

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


ClipboardSink = Callable[[str], None]
Notifier = Callable[[str, Severity], None]
Estimator = Callable[[str, str], CostEstimate]


def token_limit(config: RunConfiguration) -> int:
    """Explicit maxTokens wins over the model default; 0 disables the warning."""
    if config.max_tokens is not None:
        return config.max_tokens
    return MODEL_MAX_TOKENS.get(config.llm_model, 0)


def copy_to_clipboard(
    selection: Selection,
    config: RunConfiguration,
    clipboard: ClipboardSink,
    notify: Notifier,
    estimator: Estimator = estimate_cost,
    cancel_event=None,
    destination: str = "clipboard",
) -> Optional[str]:
    """Returns the copied text, or None if nothing was copied."""
    try:
        output = run_collection(selection, config, cancel_event=cancel_event)
        clipboard(output)
    except CollectionCancelled as e:
        logger.info("%s", e)
        notify("Copy cancelled", Severity.INFO)
        return None
    except Exception as e:
        logger.debug("Copy failed", exc_info=True)
        notify(f"Error: {e}", Severity.ERROR)
        return None

    fmt = config.output_format.value
    if not config.enable_token_counting:
        notify(f"Copied to {destination}: {fmt} format", Severity.INFO)
        return output

    try:
        estimate = estimator(config.llm_model, output)
    except Exception as e:
        logger.warning("Cost estimation failed: %s", e)
        notify(f"Copied to {destination}: {fmt} format (token count and cost unavailable)", Severity.WARNING)
        return output

    tokens = estimate.token_count
    message = f"Copied to {destination}: {fmt} format, {tokens} tokens, ${estimate.cost_usd:.4f} est. cost"
    limit = token_limit(config)
    if config.enable_token_warning and limit > 0 and tokens > limit:
        message += f"\nWARNING: Token count ({tokens}) exceeds the set limit ({limit})."
        notify(message, Severity.WARNING)
    else:
        notify(message, Severity.INFO)
    return output
