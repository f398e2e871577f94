import pytest

from brewfinder.auth.passwords import hash_password, is_strong_password, verify_password


@pytest.mark.parametrize(
    "password, expected",
    [
        ("Abcdefg1!", True),
        ("abcdefg1", False),
        ("ABCDEFG1!", False),
        ("Abcdefgh!", False),
        ("Abcdefg12", False),
        ("Ab1!", False),
        ("Str0ng_pass", True),
    ],
)
def test_password_strength_rules(password, expected):
    assert is_strong_password(password) is expected


def test_hash_is_salted_and_verifies():
    h1 = hash_password("Abcdefg1!")
    h2 = hash_password("Abcdefg1!")
    assert h1 != h2
    assert "Abcdefg1!" not in h1
    assert verify_password(h1, "Abcdefg1!")
    assert not verify_password(h1, "Abcdefg1?")


def test_verify_rejects_empty_and_garbage_hashes():
    assert not verify_password("", "Abcdefg1!")
    assert not verify_password("not-a-hash", "Abcdefg1!")


def test_hash_rejects_empty_password():
    with pytest.raises(ValueError):
        hash_password("")


def test_verify_rejects_malformed_argon2_hash():
    # argon2-shaped but the salt is too short to verify against
    corrupt = "$argon2id$v=19$m=65536,t=3,p=4$c2FsdA$aGFzaA"
    assert verify_password(corrupt, "Abcdefg1!") is False
