import base64

import pytest

from booking.encryption import deobfuscate, obfuscate
from booking.fingerprint import KeyMaterial


@pytest.mark.parametrize('plaintext', ['', 'hello', '{"step":"browse"}', 'Tan Mei Ling 陈美玲 🚗'])
def test_obfuscate_round_trip(key, plaintext) -> None:
    assert deobfuscate(obfuscate(plaintext, key), key) == (plaintext or None)


def test_output_is_base64_text_and_not_plaintext(key) -> None:
    blob = obfuscate('{"session_id":"abc"}', key)
    base64.b64decode(blob, validate=True)
    assert 'session_id' not in blob


def test_wrong_key_does_not_reveal_plaintext(key) -> None:
    blob = obfuscate('{"step":"checkout"}', key)
    assert deobfuscate(blob, KeyMaterial('zzzzzzzzzzzzzzzz')) != '{"step":"checkout"}'


@pytest.mark.parametrize('blob', [None, '', '!!!not base64!!!', 'YWJj\n', 'YQ=', 'YR=='])
def test_unreadable_payloads_return_none(key, blob) -> None:
    assert deobfuscate(blob, key) is None


def test_invalid_utf8_after_xor_returns_none() -> None:
    key = KeyMaterial('\x00')
    blob = base64.b64encode(b'\xff\xfe').decode()
    assert deobfuscate(blob, key) is None
