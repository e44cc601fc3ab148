"""Tests for signers and verifiers."""

from __future__ import annotations

import hashlib
import hmac
from concurrent.futures import ThreadPoolExecutor

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from jwtkit import verifiers as verifiers_module
from jwtkit.algorithms import Algorithm
from jwtkit.errors import (
    InvalidKeyError,
    InvalidSignatureError,
    UnsupportedAlgorithmError,
    UnsupportedKeyError,
    WeakKeyError,
)
from jwtkit.signers import HmacSigner, NoneSigner, RsaSigner, Signer, signer_for
from jwtkit.verifiers import HmacVerifier, NoneVerifier, RsaVerifier, Verifier, verifier_for

MESSAGE = b"header.claims"


@pytest.mark.parametrize(
    ("factory", "digest"),
    [
        (HmacSigner.sha256, hashlib.sha256),
        (HmacSigner.sha384, hashlib.sha384),
        (HmacSigner.sha512, hashlib.sha512),
    ],
)
def test_hmac_signer_matches_stdlib(factory, digest) -> None:
    signer = factory("secret")
    assert signer.sign(MESSAGE) == hmac.new(b"secret", MESSAGE, digest).digest()
    assert signer.sign(MESSAGE.decode("ascii")) == signer.sign(MESSAGE)


def test_hmac_round_trip_and_wrong_secret() -> None:
    signature = HmacSigner.sha256("secret").sign(MESSAGE)
    HmacVerifier.sha256("secret").verify(MESSAGE, signature)
    with pytest.raises(InvalidSignatureError):
        HmacVerifier.sha256("wrong").verify(MESSAGE, signature)
    with pytest.raises(InvalidSignatureError):
        HmacVerifier.sha256("secret").verify(MESSAGE, signature[:-1])


def test_hmac_compare_is_constant_time(monkeypatch: pytest.MonkeyPatch) -> None:
    """Signature equality goes through ``hmac.compare_digest``."""

    calls: list[tuple[bytes, bytes]] = []
    original = verifiers_module.hmac.compare_digest

    def spy(a: bytes, b: bytes) -> bool:
        calls.append((a, b))
        return original(a, b)

    monkeypatch.setattr(verifiers_module.hmac, "compare_digest", spy)
    signature = HmacSigner.sha512("secret").sign(MESSAGE)
    HmacVerifier.sha512("secret").verify(MESSAGE, signature)
    corrupt = bytes([signature[0] ^ 0x01]) + signature[1:]
    with pytest.raises(InvalidSignatureError):
        HmacVerifier.sha512("secret").verify(MESSAGE, corrupt)
    assert len(calls) == 2
    assert all(len(a) == len(b) for a, b in calls)


def test_verifiers_reject_empty_secrets() -> None:
    with pytest.raises(InvalidKeyError):
        HmacVerifier.sha256("")
    with pytest.raises(InvalidKeyError):
        HmacSigner.sha256(b"")


def test_family_mismatch_on_construction(rsa_2048) -> None:
    with pytest.raises(UnsupportedAlgorithmError):
        HmacSigner(Algorithm.RS256, "secret")
    with pytest.raises(UnsupportedAlgorithmError):
        RsaVerifier("HS256", rsa_2048.spki_public)
    with pytest.raises(UnsupportedKeyError):
        HmacSigner.sha256(rsa_2048.key)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("signer_factory", "verifier_factory", "hash_cls"),
    [
        (RsaSigner.sha256, RsaVerifier.sha256, hashes.SHA256),
        (RsaSigner.sha384, RsaVerifier.sha384, hashes.SHA384),
        (RsaSigner.sha512, RsaVerifier.sha512, hashes.SHA512),
    ],
)
def test_rsa_pkcs1_v15(rsa_2048, signer_factory, verifier_factory, hash_cls) -> None:
    signer = signer_factory(rsa_2048.pkcs8_private)
    signature = signer.sign(MESSAGE)
    assert len(signature) == 256
    # Independent check against the primitive.
    rsa_2048.key.public_key().verify(signature, MESSAGE, padding.PKCS1v15(), hash_cls())
    verifier_factory(rsa_2048.spki_public).verify(MESSAGE, signature)
    verifier_factory(rsa_2048.certificate).verify(MESSAGE, signature)
    # PKCS#1 v1.5 is deterministic.
    assert signer.sign(MESSAGE) == signature


def test_rsa_wrong_key_fails(rsa_2048, rsa_2048_other) -> None:
    signature = RsaSigner.sha256(rsa_2048.pkcs1_private).sign(MESSAGE)
    with pytest.raises(InvalidSignatureError):
        RsaVerifier.sha256(rsa_2048_other.pkcs1_public).verify(MESSAGE, signature)
    with pytest.raises(InvalidSignatureError):
        RsaVerifier.sha256(rsa_2048.spki_public).verify(MESSAGE + b"!", signature)


def test_rsa_weak_key_policy(rsa_1024) -> None:
    with pytest.raises(WeakKeyError):
        RsaSigner.sha256(rsa_1024.pkcs1_private)
    signer = RsaSigner.sha256(rsa_1024.pkcs1_private, min_key_bits=1024)
    verifier = RsaVerifier.sha256(rsa_1024.spki_public, min_key_bits=1024)
    verifier.verify(MESSAGE, signer.sign(MESSAGE))


def test_none_signer_and_verifier() -> None:
    assert NoneSigner().sign(MESSAGE) == b""
    assert NoneSigner().algorithm is Algorithm.NONE
    NoneVerifier().verify(MESSAGE, b"")
    with pytest.raises(InvalidSignatureError):
        NoneVerifier().verify(MESSAGE, b"\x00")


def test_factories_dispatch_by_algorithm(rsa_2048) -> None:
    assert isinstance(signer_for("HS384", "secret"), HmacSigner)
    assert isinstance(signer_for(Algorithm.RS512, rsa_2048.pkcs1_private), RsaSigner)
    assert isinstance(signer_for("none"), NoneSigner)
    assert isinstance(verifier_for("HS512", b"secret"), HmacVerifier)
    assert isinstance(verifier_for("RS384", rsa_2048.spki_public), RsaVerifier)
    assert isinstance(verifier_for("none"), NoneVerifier)
    with pytest.raises(UnsupportedKeyError):
        signer_for("none", "secret")
    with pytest.raises(UnsupportedKeyError):
        verifier_for("RS256")
    with pytest.raises(UnsupportedAlgorithmError):
        signer_for("ES256", "secret")


def test_protocol_conformance(rsa_2048) -> None:
    assert isinstance(HmacSigner.sha256("s"), Signer)
    assert isinstance(RsaSigner.sha256(rsa_2048.key), Signer)
    assert isinstance(NoneSigner(), Signer)
    assert isinstance(HmacVerifier.sha256("s"), Verifier)
    assert isinstance(RsaVerifier.sha256(rsa_2048.key), Verifier)
    assert isinstance(NoneVerifier(), Verifier)


def test_can_verify_only_its_algorithm() -> None:
    verifier = HmacVerifier.sha256("secret")
    assert verifier.can_verify(Algorithm.HS256)
    assert verifier.can_verify("HS256")
    assert not verifier.can_verify(Algorithm.HS512)
    assert not verifier.can_verify("bogus")


def test_repr_never_shows_key_material(rsa_2048) -> None:
    assert "topsecret" not in repr(HmacSigner.sha256("topsecret"))
    assert "topsecret" not in repr(HmacVerifier.sha256("topsecret"))
    assert "2048 bits" in repr(RsaSigner.sha256(rsa_2048.key))


def test_signers_are_safe_for_concurrent_use(rsa_2048) -> None:
    hmac_signer = HmacSigner.sha256("secret")
    rsa_signer = RsaSigner.sha256(rsa_2048.key)
    messages = [f"message-{i}".encode("ascii") for i in range(64)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        hmac_results = list(pool.map(hmac_signer.sign, messages))
        rsa_results = list(pool.map(rsa_signer.sign, messages))

    assert hmac_results == [hmac_signer.sign(m) for m in messages]
    assert rsa_results == [rsa_signer.sign(m) for m in messages]
