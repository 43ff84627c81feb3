import pytest

from rasteringest.adapters.erdas_decoder import HFA_MAGIC, ErdasDecoder, looks_like_erdas


def test_reads_single_band_after_opaque_header():
    payload = HFA_MAGIC + bytes(512 - len(HFA_MAGIC)) + bytes([7]) * (512 * 512)
    out = ErdasDecoder().decode(payload)
    assert (out.width, out.height, out.num_bands) == (512, 512, 1)
    assert int(out.raw_bands.max()) == 7
    assert out.georef.kind == "none"


def test_small_configured_size():
    out = ErdasDecoder(header_bytes=4, width=2, height=1).decode(b"HDR!" + bytes([3, 4]))
    assert out.raw_bands.tolist() == [[3, 4]]


def test_truncated_fails():
    with pytest.raises(ValueError, match="truncado"):
        ErdasDecoder().decode(bytes(1000))


def test_magic_sniff():
    assert looks_like_erdas(HFA_MAGIC + b"\x00")
    assert not looks_like_erdas(b"ENVI")
