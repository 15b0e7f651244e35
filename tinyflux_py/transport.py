"""Helpers for forwarding actions between execution contexts.

The transport itself (a message channel to another process) lives outside
tinyflux. These helpers only define the boundary: outgoing actions lose
their context reference, and incoming messages are dispatched whenever
they carry a non-empty string ``type``. Any other keys travel along.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict

from .engine.store import Store
from .errors import ActionContractError
from .state.actions import Action, ensure_action
from .streams import operators as ops


logger = logging.getLogger(__name__)


def to_message(action: Any) -> Dict[str, Any]:
    """Serialize an action for another context, dropping its context."""
    action = ensure_action(action)
    return action.model_dump(mode="json")


def from_message(message: Any) -> Action:
    """Rebuild an action from a received message (dict or JSON string)."""
    if isinstance(message, (str, bytes)):
        try:
            message = json.loads(message)
        except ValueError as exc:
            raise ActionContractError(message, reason="not valid JSON") from exc
    if isinstance(message, Mapping) and "context" in message:
        message = {key: value for key, value in message.items() if key != "context"}
    return ensure_action(message)


def receive(store: Store, message: Any) -> bool:
    """Dispatch a received message if it looks like an action.

    Returns False and ignores the message when it is not a mapping with a
    string type. Errors raised while the action is processed propagate.
    """
    if not isinstance(message, Mapping) or not isinstance(message.get("type"), str):
        logger.debug("Ignoring message without an action type: %r", message)
        return False
    try:
        action = from_message(message)
    except ActionContractError as exc:
        logger.debug("Ignoring malformed action message: %s", exc)
        return False
    store.dispatch(action)
    return True


def propagate_action(send: Callable[[Dict[str, Any]], Any]) -> ops.Operator:
    """Tap operator that forwards each action through ``send``."""
    return ops.tap(lambda action: send(to_message(action)))
