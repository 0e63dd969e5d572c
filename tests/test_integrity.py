from booking.fingerprint import KeyMaterial
from booking.integrity import compute_checksum, verify_checksum


def test_checksum_is_hex_sha256_hmac(key) -> None:
    tag = compute_checksum('payload', key)
    assert len(tag) == 64
    assert tag == tag.lower()
    assert compute_checksum('payload', key) == tag


def test_verify_accepts_matching_tag(key) -> None:
    tag = compute_checksum('payload', key)
    assert verify_checksum('payload', key, tag)


def test_verify_rejects_changed_payload_or_key(key) -> None:
    tag = compute_checksum('payload', key)
    assert not verify_checksum('payload!', key, tag)
    assert not verify_checksum('payload', KeyMaterial('0000000000000000'), tag)


def test_verify_rejects_malformed_tags(key) -> None:
    tag = compute_checksum('payload', key)
    assert not verify_checksum('payload', key, '')
    assert not verify_checksum('payload', key, None)
    assert not verify_checksum('payload', key, 'not-hex')
    assert not verify_checksum('payload', key, tag.upper())
    assert not verify_checksum('payload', key, tag[:-2])
