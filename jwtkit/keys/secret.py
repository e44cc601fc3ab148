"""Opaque holder for HMAC shared secrets."""

from __future__ import annotations

import threading

from ..errors import InvalidKeyError


class HmacSecret:
    """Shared secret bytes that never show up in ``repr`` or logs.

    Text secrets are UTF-8 encoded. No minimum length is enforced here;
    callers that want a policy (for example at least the hash output size)
    should check :meth:`__len__` before building a signer.
    """

    __slots__ = ("_material", "_lock", "_wiped")

    def __init__(self, secret: str | bytes | bytearray | memoryview) -> None:
        if isinstance(secret, str):
            material = bytearray(secret.encode("utf-8"))
        elif isinstance(secret, (bytes, bytearray, memoryview)):
            material = bytearray(secret)
        else:
            raise InvalidKeyError("HMAC secret must be text or bytes")
        if not material:
            raise InvalidKeyError("HMAC secret must not be empty")
        self._material = material
        self._lock = threading.Lock()
        self._wiped = False

    @classmethod
    def coerce(cls, secret: HmacSecret | str | bytes | bytearray | memoryview) -> HmacSecret:
        if isinstance(secret, HmacSecret):
            return secret
        return cls(secret)

    def __len__(self) -> int:
        return len(self._material)

    def __repr__(self) -> str:
        return f"HmacSecret(<redacted>, {len(self._material)} bytes)"

    __str__ = __repr__

    def __reduce__(self):  # pragma: no cover - guard against accidental pickling
        raise TypeError("HmacSecret cannot be pickled")

    @property
    def wiped(self) -> bool:
        return self._wiped

    def material(self) -> bytes:
        """Return a copy of the secret bytes for one primitive invocation."""

        with self._lock:
            if self.wiped:
                raise InvalidKeyError("HMAC secret has been wiped")
            return bytes(self._material)

    def wipe(self) -> None:
        """Overwrite the secret buffer with zeros; the secret becomes unusable."""

        with self._lock:
            for index in range(len(self._material)):
                self._material[index] = 0
            self._wiped = True


__all__ = ["HmacSecret"]
