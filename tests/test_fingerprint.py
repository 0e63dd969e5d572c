from booking.fingerprint import (
    EnvironmentSignals, KeyMaterial, KEY_LENGTH, derive_key, fingerprint_hash, _to_base36, _to_int32
)


class _Request:
    def __init__(self, headers):
        self.headers = headers


def test_rolling_hash_small_inputs() -> None:
    assert fingerprint_hash('') == 0
    assert fingerprint_hash('a') == 97
    assert fingerprint_hash('ab') == 97 * 31 + 98


def test_hash_wraps_to_signed_32_bit() -> None:
    assert _to_int32(2 ** 31) == -(2 ** 31)
    assert _to_int32(2 ** 32 + 5) == 5
    value = fingerprint_hash('x' * 500)
    assert -(2 ** 31) <= value < 2 ** 31


def test_base36_rendering() -> None:
    assert _to_base36(0) == '0'
    assert _to_base36(3105) == '2e9'
    assert _to_base36(-3105) == '-2e9'


def test_derive_key_is_deterministic_and_fixed_length(signals) -> None:
    first = derive_key(signals)
    second = derive_key(EnvironmentSignals(**signals.__dict__))
    assert first == second
    assert len(first.token) == KEY_LENGTH


def test_derive_key_is_cached(signals) -> None:
    assert derive_key(signals) is derive_key(signals)


def test_different_environments_get_different_keys(signals) -> None:
    other = EnvironmentSignals(signals.user_agent, 1280, 720, signals.timezone)
    assert derive_key(signals) != derive_key(other)


def test_short_keys_are_zero_padded() -> None:
    key = derive_key(EnvironmentSignals(user_agent='', screen_width=0, screen_height=0, timezone=''))
    assert len(key.token) == KEY_LENGTH
    assert key.token.startswith('0')


def test_key_material_hides_its_value_in_repr() -> None:
    assert 'abc' not in repr(KeyMaterial('abc'))


def test_signals_from_request_headers() -> None:
    request = _Request({
        'User-Agent': 'UA',
        'X-Screen-Resolution': '1440x900',
        'X-Timezone': 'Asia/Singapore',
    })
    signals = EnvironmentSignals.from_request(request)
    assert signals == EnvironmentSignals('UA', 1440, 900, 'Asia/Singapore')
    assert signals.fingerprint() == 'UA-1440x900-Asia/Singapore'


def test_signals_fall_back_when_headers_missing() -> None:
    signals = EnvironmentSignals.from_request(_Request({'X-Screen-Resolution': 'garbage'}))
    assert signals == EnvironmentSignals('', 0, 0, 'UTC')
