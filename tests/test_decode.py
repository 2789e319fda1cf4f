import binascii

import pytest

from omni_decoder import (
    DECODERS,
    Encoding,
    decode,
    decode_base16,
    decode_base32,
    decode_base64,
    decode_binary,
    decode_url,
    is_printable_bytes,
    normalize_decoder_return,
)


def test_decode_binary():
    assert decode_binary("01101000 01101001") == b"hi"
    with pytest.raises(ValueError):
        decode_binary("0101")
    with pytest.raises(ValueError):
        decode_binary("0110100a")


def test_decode_base16():
    assert decode_base16("63 68 61 6c 6c 65 6e 67 65") == b"challenge"
    with pytest.raises(binascii.Error):
        decode_base16("abc")
    with pytest.raises(binascii.Error):
        decode_base16("zz")


def test_decode_url():
    assert decode_url("hello%20world") == b"hello world"
    assert decode_url("%C3%A9") == b"\xc3\xa9"
    # malformed escapes pass through untouched
    assert decode_url("100%zz") == b"100%zz"


def test_decode_base32():
    assert decode_base32("NBSWY3DP") == b"hello"
    assert decode_base32("NBUQ====") == b"hi"
    with pytest.raises(binascii.Error):
        decode_base32("ABC")


def test_decode_base64():
    assert decode_base64("aGVsbG8=") == b"hello"
    with pytest.raises(binascii.Error):
        decode_base64("a===")
    with pytest.raises(binascii.Error):
        decode_base64("aGVs*G8=")


def test_normalize_decoder_return():
    def raises(data):
        raise ValueError("boom")

    def raises_type_error(data):
        raise TypeError("boom")

    assert normalize_decoder_return(lambda data: b"ok")("abc") == b"ok"
    assert normalize_decoder_return(raises)("abc") is None
    assert normalize_decoder_return(raises_type_error)("abc") is None
    assert normalize_decoder_return(raises).__name__ == "raises"


@pytest.mark.parametrize("encoding, bad_input", [
    (Encoding.BINARY, "0101"),
    (Encoding.HEX, "abc"),
    (Encoding.URL, "\ud800%41"),
    (Encoding.BASE32, "ABC"),
    (Encoding.BASE64, "a==="),
], ids=["binary", "hex", "url", "base32", "base64"])
def test_registered_decoders_map_errors_to_none(encoding, bad_input):
    assert DECODERS[encoding](bad_input) is None


def test_decode_lone_surrogate_fails_cleanly():
    outcome = decode("\ud800%41")
    assert not outcome.success
    assert outcome.method is Encoding.URL
    assert outcome.error == "URL Encoding decode failed"


def test_decode_success():
    outcome = decode("NjM2ODYxNmM2YzY1NmU2NzY1")
    assert outcome.success
    assert outcome.method is Encoding.BASE64
    assert outcome.data == b"6368616c6c656e6765"
    assert outcome.error is None


def test_decode_hex_not_base64():
    outcome = decode("6368616c6c656e6765")
    assert outcome.method is Encoding.HEX
    assert outcome.data == b"challenge"


def test_decode_rejects_unchanged_output():
    outcome = decode("100%")
    assert not outcome.success
    assert outcome.method is Encoding.URL
    assert outcome.data is None
    assert "unchanged" in outcome.error


def test_decode_unknown():
    outcome = decode("challenge")
    assert not outcome.success
    assert outcome.method is Encoding.UNKNOWN
    assert outcome.error == "No matching encoding"


def test_decode_structural_failure():
    outcome = decode("ABC")
    assert not outcome.success
    assert outcome.method is Encoding.BASE32
    assert outcome.error == "Base32 decode failed"


def test_is_printable_bytes():
    assert is_printable_bytes(b"hello world\t\r\n")
    assert not is_printable_bytes(b"\x00abc")
    assert not is_printable_bytes(b"\x7f")
    assert not is_printable_bytes("é".encode("utf-8"))
