"""
Field-Level Encryption.

EncryptableMixin gives a model a declared list of encrypted fields and the
coroutines that move them to and from ciphertext through the remote crypto
service. Encryption is applied by the repositories right before a flush;
decryption is applied by services before results leave the service layer.

Field paths may be dotted to reach into a JSON column:

    class User(EncryptableMixin, UUIDMixin, TimestampMixin, Base):
        __encrypted_fields__ = ("first_name", "last_name", "social_links.linkedin")

Ciphertext is recognized by CIPHERTEXT_PREFIX, which is what the crypto
service emits for every encrypted value. Values already carrying the prefix
are never encrypted twice and plain values are never sent for decryption.
"""

from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import inspect
from sqlalchemy.orm.attributes import set_committed_value

from newsdesk.backend.core.exceptions import ApplicationError, ExternalServiceError
from newsdesk.backend.core.logging import get_logger

if TYPE_CHECKING:
    from newsdesk.backend.clients.crypto import CryptoClient

logger = get_logger(__name__)

CIPHERTEXT_PREFIX = "U2FsdGVk"


def is_ciphertext(value: Any) -> bool:
    """True when the value looks like output of the crypto service."""
    return isinstance(value, str) and value.startswith(CIPHERTEXT_PREFIX)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def get_path(container: Any, path: str) -> Any:
    """Read a dotted path from nested dicts; missing segments yield None."""
    current = container
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def set_path(container: dict[str, Any], path: str, value: Any) -> None:
    """Write a dotted path into nested dicts, creating containers as needed."""
    parts = path.split(".")
    current = container
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def _lookup_result(result: Any, path: str) -> Any:
    """Find a field in a crypto response that may be flat (dotted keys) or nested."""
    if not isinstance(result, dict):
        raise ExternalServiceError("Crypto operation failed: malformed response", service="crypto")
    if path in result:
        return result[path]
    return get_path(result, path)


async def encrypt_values(
    values: dict[str, Any],
    fields: tuple[str, ...] | list[str],
    crypto: "CryptoClient",
) -> dict[str, Any]:
    """
    Encrypt the encrypted fields found in a dict of column values.

    Used on the bulk UPDATE path, where there is no instance to work on.
    A field may appear either under its dotted key ("social_links.linkedin")
    or nested ({"social_links": {"linkedin": ...}}); nested wins.

    Returns:
        A copy of `values` with ciphertext in place of the plain values.
    """
    updated = _deep_copy(values)
    to_encrypt: dict[str, str] = {}
    location: dict[str, str] = {}

    for field in fields:
        nested = get_path(updated, field)
        if not _is_empty(nested):
            value, where = nested, "nested"
        elif not _is_empty(updated.get(field)):
            value, where = updated[field], "dotted"
        else:
            continue
        if is_ciphertext(value):
            continue
        to_encrypt[field] = str(value)
        location[field] = where

    if not to_encrypt:
        return updated

    encrypted = await crypto.encrypt(to_encrypt)
    for field, where in location.items():
        ciphertext = _lookup_result(encrypted, field)
        if where == "dotted":
            updated[field] = ciphertext
        else:
            set_path(updated, field, ciphertext)
    return updated


def _deep_copy(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _deep_copy(item) for key, item in value.items()}
    return value


class EncryptableMixin:
    """Mixin for ORM models that store some fields as remote-service ciphertext."""

    __encrypted_fields__: ClassVar[tuple[str, ...]] = ()

    def get_field(self, path: str) -> Any:
        """Read a possibly dotted field path from this instance."""
        head, _, rest = path.partition(".")
        value = getattr(self, head, None)
        if not rest:
            return value
        return get_path(value, rest)

    def _assign(self, path: str, value: Any, committed: bool) -> None:
        head, _, rest = path.partition(".")
        if rest:
            # Replace the JSON container so the change is visible to the ORM
            container = _deep_copy(getattr(self, head, None))
            if not isinstance(container, dict):
                container = {}
            set_path(container, rest, value)
            value = container
        if committed:
            set_committed_value(self, head, value)
        else:
            setattr(self, head, value)

    def _changed_heads(self) -> set[str] | None:
        """Column names modified since load, or None when every field counts."""
        state = inspect(self)
        if state.transient or state.pending:
            return None
        return {
            path.partition(".")[0]
            for path in self.__encrypted_fields__
            if state.attrs[path.partition(".")[0]].history.has_changes()
        }

    async def encrypt_fields(self, crypto: "CryptoClient") -> int:
        """
        Encrypt every non-empty encrypted field in one batched request.

        Only new instances or columns modified since load are considered,
        so plaintext restored by decrypt() is never sent back.

        Returns:
            Number of fields encrypted.
        """
        changed = self._changed_heads()
        to_encrypt: dict[str, str] = {}
        for field in self.__encrypted_fields__:
            if changed is not None and field.partition(".")[0] not in changed:
                continue
            value = self.get_field(field)
            if _is_empty(value) or is_ciphertext(value):
                continue
            to_encrypt[field] = str(value)

        if not to_encrypt:
            return 0

        encrypted = await crypto.encrypt(to_encrypt)
        for field in to_encrypt:
            self._assign(field, _lookup_result(encrypted, field), committed=False)

        logger.debug(
            "Fields encrypted",
            extra={"model": type(self).__name__, "fields": sorted(to_encrypt)},
        )
        return len(to_encrypt)

    async def decrypt(self, crypto: "CryptoClient") -> "EncryptableMixin":
        """
        Decrypt every ciphertext field in one batched request.

        Decrypted values are installed as the committed state, so the
        instance is not marked dirty and plaintext is never flushed.
        If the remote call fails, every field that held ciphertext is set
        to None rather than leaking ciphertext to the caller.
        """
        pending = {
            field: value
            for field in self.__encrypted_fields__
            if is_ciphertext(value := self.get_field(field))
        }
        if not pending:
            return self

        try:
            decrypted = await crypto.decrypt(pending)
            values = {field: _lookup_result(decrypted, field) for field in pending}
        except ApplicationError as e:
            logger.warning(
                "Decryption failed, clearing encrypted fields",
                extra={"model": type(self).__name__, "error": str(e)},
            )
            values = dict.fromkeys(pending)

        for field, value in values.items():
            self._assign(field, value, committed=True)
        return self

    async def is_encrypted(self, field: str, crypto: "CryptoClient") -> bool:
        """True if the remote service can decrypt the current field value."""
        value = self.get_field(field)
        if _is_empty(value):
            return False
        try:
            await crypto.decrypt(value)
        except ApplicationError:
            return False
        return True
