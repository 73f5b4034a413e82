import pytest

from valence.hasher import Sp1Hasher

DOMAIN_ID = "domain"


def _state_proof(value: int) -> dict:
    payload = value.to_bytes(8, "little")
    return {
        "domain": DOMAIN_ID,
        "root": Sp1Hasher.hash(payload),
        "payload": payload,
        "proof": b"",
    }


def _verify(proof: dict) -> int:
    if len(proof["payload"]) != 8:
        raise ValueError("invalid payload")
    if proof["domain"] != DOMAIN_ID:
        raise ValueError("invalid domain")
    if Sp1Hasher.hash(proof["payload"]) != proof["root"]:
        raise ValueError("invalid root")
    return int.from_bytes(proof["payload"], "little")


def test_domain_is_consistent():
    value = 378249
    proof = _state_proof(value)
    assert _verify(proof) == value


def test_domain_rejects_tampered_payload():
    proof = _state_proof(378249)
    proof["payload"] = (378250).to_bytes(8, "little")
    with pytest.raises(ValueError):
        _verify(proof)


def test_hash_of_empty_data_is_sha256_of_data_prefix():
    assert Sp1Hasher.hash(b"").hex() == (
        "6e340b9cffb37a989ca544e6bb780a2c78901d3fb33738768511a30617afa01d"
    )


def test_key_of_empty_input_is_plain_sha256_of_nothing():
    assert Sp1Hasher.key("", b"").hex() == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_key_concatenates_context_and_data():
    assert Sp1Hasher.key("ab", b"cd") == Sp1Hasher.key("a", b"bcd")
    assert Sp1Hasher.key("abc", b"") == Sp1Hasher.key("", b"abc")


def test_hash_is_domain_separated_from_key():
    assert Sp1Hasher.hash(b"data") != Sp1Hasher.key("", b"data")
    assert Sp1Hasher.hash(b"data") == Sp1Hasher.key("\x00", b"data")


def test_digest_matches_hash_of_concatenation():
    chunks = [b"some ", b"block ", b"payload"]
    assert Sp1Hasher.digest(chunks) == Sp1Hasher.hash(b"some block payload")


def test_digest_accepts_generator_and_empty():
    assert Sp1Hasher.digest(c for c in [b"x", b"y"]) == Sp1Hasher.hash(b"xy")
    assert Sp1Hasher.digest([]) == Sp1Hasher.hash(b"")


def test_merge_is_order_sensitive_and_32_bytes():
    a = Sp1Hasher.hash(b"a")
    b = Sp1Hasher.hash(b"b")
    merged = Sp1Hasher.merge(a, b)
    assert len(merged) == 32
    assert merged != Sp1Hasher.merge(b, a)


def test_merge_is_separated_from_data_hash():
    a = Sp1Hasher.hash(b"a")
    b = Sp1Hasher.hash(b"b")
    assert Sp1Hasher.merge(a, b) != Sp1Hasher.hash(a + b)
    assert Sp1Hasher.merge(a, b) == Sp1Hasher.key("\x01", a + b)


def test_merge_rejects_wrong_length():
    with pytest.raises(ValueError):
        Sp1Hasher.merge(b"short", Sp1Hasher.hash(b"b"))