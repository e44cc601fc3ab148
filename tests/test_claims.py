"""Tests for the claim model and numeric-date serializer."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from jwtkit.claims import Claims, from_numeric_date, to_numeric_date
from jwtkit.errors import MalformedClaimError, MalformedTokenError


def test_numeric_date_floors_datetimes() -> None:
    instant = datetime(2018, 1, 18, 1, 30, 22, 999_999, tzinfo=timezone.utc)
    assert to_numeric_date(instant) == 1516239022
    assert to_numeric_date(None) is None
    assert to_numeric_date(1516239022.7) == 1516239022


def test_numeric_date_treats_naive_as_utc() -> None:
    assert to_numeric_date(datetime(1970, 1, 1, 0, 1)) == 60


def test_numeric_date_respects_offsets() -> None:
    offset = timezone(timedelta(hours=2))
    assert to_numeric_date(datetime(1970, 1, 1, 2, 0, tzinfo=offset)) == 0


@pytest.mark.parametrize("seconds", [0, 1, 1516239022, 2_000_000_000])
def test_numeric_date_round_trip_preserves_epoch_second(seconds: int) -> None:
    parsed = from_numeric_date(seconds)
    assert parsed is not None
    assert to_numeric_date(parsed) == seconds
    assert from_numeric_date(float(seconds) + 0.9) == parsed


@pytest.mark.parametrize("value", ["1516239022", True, [1], {"t": 1}, float("nan")])
def test_from_numeric_date_rejects_non_numbers(value: object) -> None:
    with pytest.raises(MalformedClaimError):
        from_numeric_date(value)


def test_claims_preserve_insertion_order_and_custom_values() -> None:
    claims = Claims({"sub": "1234567890", "name": "John Doe", "iat": 1516239022, "roles": ["a"]})
    assert list(claims) == ["sub", "name", "iat", "roles"]
    assert claims.to_json() == (
        b'{"sub":"1234567890","name":"John Doe","iat":1516239022,"roles":["a"]}'
    )
    assert claims == {"sub": "1234567890", "name": "John Doe", "iat": 1516239022, "roles": ["a"]}


def test_reserved_accessors() -> None:
    claims = Claims(iss="issuer", sub="subject", aud="api", exp=2000000000, nbf=1000, iat=999.9, jti="id-1")
    assert claims.issuer == "issuer"
    assert claims.subject == "subject"
    assert claims.audience == ("api",)
    assert claims.jwt_id == "id-1"
    assert claims.expiration == datetime.fromtimestamp(2000000000, tz=timezone.utc)
    assert claims.not_before == datetime.fromtimestamp(1000, tz=timezone.utc)
    assert claims["iat"] == 999


def test_datetime_claims_serialize_as_integers() -> None:
    claims = Claims().with_expiration(datetime(2033, 5, 18, 3, 33, 20, 500_000, tzinfo=timezone.utc))
    assert claims["exp"] == 2000000000
    assert claims.to_json() == b'{"exp":2000000000}'


def test_null_numeric_date_serializes_as_null() -> None:
    assert Claims().with_not_before(None).to_json() == b'{"nbf":null}'


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("exp", "soon"),
        ("nbf", True),
        ("iat", [1]),
        ("iss", 7),
        ("sub", {"id": 1}),
        ("jti", 1.5),
        ("aud", 3),
        ("aud", ["ok", 1]),
    ],
)
def test_reserved_type_mismatch(name: str, value: object) -> None:
    with pytest.raises(MalformedClaimError):
        Claims({name: value})


def test_claims_are_immutable_snapshots() -> None:
    source = {"groups": ["admin"], "aud": ["a", "b"]}
    claims = Claims(source)
    source["groups"].append("root")
    claims["groups"].append("other")
    assert claims["groups"] == ["admin"]
    assert claims.audience == ("a", "b")
    with pytest.raises(TypeError):
        claims["sub"] = "x"  # type: ignore[index]


def test_builders_return_new_instances() -> None:
    base = Claims(sub="user")
    updated = base.with_issuer("me").with_audience(["x", "y"]).with_jwt_id("j")
    assert "iss" not in base
    assert updated.issuer == "me"
    assert updated.audience == ("x", "y")
    assert updated.without("jti", "aud") == {"sub": "user", "iss": "me"}


def test_typed_getters() -> None:
    claims = Claims(name="Ann", age=31, admin=True, score=1.5, tags=["x"], meta={"k": "v"})
    assert claims.get_string("name") == "Ann"
    assert claims.get_int("age") == 31
    assert claims.get_bool("admin") is True
    assert claims.get_number("score") == 1.5
    assert claims.get_list("tags") == ["x"]
    assert claims.get_object("meta") == {"k": "v"}
    assert claims.get_string("missing") is None
    with pytest.raises(MalformedClaimError):
        claims.get_int("admin")
    with pytest.raises(MalformedClaimError):
        claims.get_string("age")


def test_temporal_helpers() -> None:
    claims = Claims(exp=100, nbf=50)
    assert claims.is_expired(100)
    assert not claims.is_expired(99)
    assert claims.is_unavailable_for_processing(49)
    assert not claims.is_unavailable_for_processing(datetime.fromtimestamp(50, tz=timezone.utc))


def test_from_json_rejects_non_objects_and_bad_json() -> None:
    with pytest.raises(MalformedTokenError):
        Claims.from_json(b"[1,2]")
    with pytest.raises(MalformedTokenError):
        Claims.from_json(b"{not json")
    with pytest.raises(MalformedTokenError):
        Claims.from_json(b"\xff\xfe")


def test_from_json_floors_fractional_dates() -> None:
    claims = Claims.from_json(b'{"exp":1516239022.99,"custom":1.25}')
    assert claims["exp"] == 1516239022
    assert claims["custom"] == 1.25


def test_negative_fractional_dates_floor_on_every_path() -> None:
    assert to_numeric_date(-1.5) == -2
    assert Claims(exp=-1.5)["exp"] == -2
    assert Claims.from_json(b'{"nbf":-1.5}')["nbf"] == -2
    assert from_numeric_date(-1.5) == datetime.fromtimestamp(-2, tz=timezone.utc)


def test_lone_surrogates_are_rejected_on_serialization() -> None:
    decoded = Claims.from_json(b'{"name":"\\ud800"}')
    with pytest.raises(MalformedClaimError):
        decoded.to_json()


def test_to_json_rejects_non_finite_numbers() -> None:
    with pytest.raises(MalformedClaimError):
        Claims(score=float("inf")).to_json()


def test_to_json_keeps_unicode_as_utf8() -> None:
    assert Claims(name="Zoë").to_json() == '{"name":"Zoë"}'.encode("utf-8")
