"""
Smart Decrypt.

Walks an arbitrary result tree (lists, ORM instances, dicts) and decrypts
every encryptable model it finds, concurrently. Only relationships that are
already loaded are followed, so the walk never issues SQL.

Usage:
    articles = await repo.list_pending()
    await smart_decrypt(articles, crypto)   # decrypts every article.author
"""

import asyncio
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from sqlalchemy import inspect

from newsdesk.backend.core.exceptions import ApplicationError
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.models.base import Base
from newsdesk.backend.models.encryption import EncryptableMixin

if TYPE_CHECKING:
    from newsdesk.backend.clients.crypto import CryptoClient

logger = get_logger(__name__)

_LEAF_TYPES = (str, bytes, int, float, bool, datetime, date, BaseModel)


def _loaded_relationships(instance: Base) -> list[Any]:
    """Values of relationships already present on the instance."""
    state = inspect(instance)
    unloaded = state.unloaded
    return [
        state.dict.get(rel.key)
        for rel in state.mapper.relationships
        if rel.key not in unloaded
    ]


async def _visit(node: Any, crypto: "CryptoClient", seen: set[int], label: str) -> None:
    try:
        await _walk(node, crypto, seen)
    except ApplicationError as e:
        logger.warning("Skipping node that failed to decrypt", extra={"node": label, "error": str(e)})


async def _walk(node: Any, crypto: "CryptoClient", seen: set[int]) -> None:
    if node is None or isinstance(node, _LEAF_TYPES):
        return
    if id(node) in seen:
        return

    if isinstance(node, (list, tuple, set, frozenset)):
        seen.add(id(node))
        await asyncio.gather(
            *(_visit(item, crypto, seen, f"item[{index}]") for index, item in enumerate(node))
        )
        return

    if isinstance(node, Base):
        seen.add(id(node))
        if isinstance(node, EncryptableMixin):
            await node.decrypt(crypto)
        await asyncio.gather(
            *(_visit(child, crypto, seen, type(node).__name__) for child in _loaded_relationships(node))
        )
        return

    if isinstance(node, dict):
        seen.add(id(node))
        await asyncio.gather(
            *(_visit(value, crypto, seen, str(key)) for key, value in node.items())
        )


async def smart_decrypt(data: Any, crypto: "CryptoClient") -> None:
    """
    Decrypt in place every encryptable model reachable from `data`.

    Failures of single nodes are logged and skipped; the walk never raises
    for them. `None` is a no-op.
    """
    if data is None:
        return
    await _visit(data, crypto, set(), "root")
