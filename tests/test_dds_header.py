import struct

import pytest
from hypothesis import given, strategies as st

from ddsmesh.dds_header import (
    DDS_ALPHA,
    DDS_BUMPDUDV,
    DDS_FOURCC,
    DDS_LUMINANCE,
    DDS_MAGIC,
    DDS_RGB,
    AlphaMode,
    DdsError,
    DdsHeader,
    DdsHeaderDxt10,
    DdsPixelFormat,
    alpha_mode,
    dxgi_format_from_pixel_format,
    make_fourcc,
    parse_dds,
)
from ddsmesh.formats import DxgiFormat


def _pixel_format(flags=0, fourcc=0, bits=0, masks=(0, 0, 0, 0), size=32):
    return DdsPixelFormat(size, flags, fourcc, bits, *masks)


def _build(width=4, height=4, mips=1, pf=None, header_size=124,
           dxt10=None, payload=b"", magic=b"DDS "):
    pf = pf or _pixel_format(DDS_RGB, 0, 32,
                             (0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000))
    body = struct.pack(
        "<7I44x8I5I",
        header_size, 0x1007, height, width, 0, 0, mips,
        pf.size, pf.flags, pf.fourcc, pf.rgb_bit_count,
        pf.r_mask, pf.g_mask, pf.b_mask, pf.a_mask,
        0x1000, 0, 0, 0, 0,
    )
    ext = struct.pack("<5I", *dxt10) if dxt10 is not None else b""
    return magic + body + ext + payload


def _header(pf):
    return DdsHeader(124, 0, 1, 1, 0, 0, 1, pf, 0, 0, 0, 0)


def test_magic_matches_dds_text():
    assert DDS_MAGIC == 0x20534444
    assert make_fourcc("DDS ") == DDS_MAGIC


def test_make_fourcc_accepts_bytes_and_str():
    assert make_fourcc(b"DXT1") == make_fourcc("DXT1")
    assert make_fourcc("DXT1") & 0xFF == ord("D")


@pytest.mark.parametrize("code", ["", "DXT", "DXT10"])
def test_make_fourcc_rejects_wrong_length(code):
    with pytest.raises(ValueError):
        make_fourcc(code)


@given(st.binary(min_size=4, max_size=4))
def test_make_fourcc_round_trip(raw):
    assert make_fourcc(raw).to_bytes(4, "little") == raw


def test_parse_basic_header():
    payload = bytes(range(64))
    header, dxt10, bits = parse_dds(_build(width=8, height=2, mips=3, payload=payload))
    assert dxt10 is None
    assert (header.width, header.height, header.mip_map_count) == (8, 2, 3)
    assert header.size == 124
    assert header.pixel_format.rgb_bit_count == 32
    assert header.caps == 0x1000
    assert bits == payload


@given(st.integers(1, 1 << 16), st.integers(1, 1 << 16), st.binary(max_size=32))
def test_parse_round_trip(width, height, payload):
    header, _, bits = parse_dds(_build(width=width, height=height, payload=payload))
    assert (header.width, header.height) == (width, height)
    assert bits == payload


def test_parse_dx10_header():
    pf = _pixel_format(DDS_FOURCC, make_fourcc("DX10"))
    data = _build(pf=pf, dxt10=(int(DxgiFormat.BC7_UNORM), 3, 4, 2, 1), payload=b"xy")
    header, dxt10, bits = parse_dds(data)
    assert dxt10 == DdsHeaderDxt10(DxgiFormat.BC7_UNORM, 3, 4, 2, 1)
    assert header.pixel_format.is_dx10
    assert bits == b"xy"


def test_parse_too_short():
    with pytest.raises(DdsError):
        parse_dds(_build()[:100])


def test_parse_bad_magic():
    with pytest.raises(DdsError):
        parse_dds(_build(magic=b"PNG "))


def test_parse_bad_header_size():
    with pytest.raises(DdsError):
        parse_dds(_build(header_size=120))


def test_parse_bad_pixel_format_size():
    with pytest.raises(DdsError):
        parse_dds(_build(pf=_pixel_format(DDS_RGB, size=24)))


def test_parse_truncated_dx10():
    pf = _pixel_format(DDS_FOURCC, make_fourcc("DX10"))
    with pytest.raises(DdsError):
        parse_dds(_build(pf=pf))


@pytest.mark.parametrize("bits,masks,expected", [
    (32, (0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000), DxgiFormat.R8G8B8A8_UNORM),
    (32, (0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000), DxgiFormat.B8G8R8A8_UNORM),
    (32, (0x00FF0000, 0x0000FF00, 0x000000FF, 0x00000000), DxgiFormat.B8G8R8X8_UNORM),
    (32, (0x3FF00000, 0x000FFC00, 0x000003FF, 0xC0000000), DxgiFormat.R10G10B10A2_UNORM),
    (32, (0x0000FFFF, 0xFFFF0000, 0, 0), DxgiFormat.R16G16_UNORM),
    (32, (0xFFFFFFFF, 0, 0, 0), DxgiFormat.R32_FLOAT),
    (32, (0x000000FF, 0x0000FF00, 0x00FF0000, 0), DxgiFormat.UNKNOWN),
    (24, (0xFF0000, 0xFF00, 0xFF, 0), DxgiFormat.UNKNOWN),
    (16, (0x7C00, 0x03E0, 0x001F, 0x8000), DxgiFormat.B5G5R5A1_UNORM),
    (16, (0xF800, 0x07E0, 0x001F, 0x0000), DxgiFormat.B5G6R5_UNORM),
    (16, (0x0F00, 0x00F0, 0x000F, 0xF000), DxgiFormat.B4G4R4A4_UNORM),
    (16, (0x7C00, 0x03E0, 0x001F, 0x0000), DxgiFormat.UNKNOWN),
])
def test_rgb_formats(bits, masks, expected):
    assert dxgi_format_from_pixel_format(_pixel_format(DDS_RGB, 0, bits, masks)) == expected


@pytest.mark.parametrize("flags,bits,masks,expected", [
    (DDS_LUMINANCE, 8, (0xFF, 0, 0, 0), DxgiFormat.R8_UNORM),
    (DDS_LUMINANCE, 8, (0xFF, 0, 0, 0xFF00), DxgiFormat.R8G8_UNORM),
    (DDS_LUMINANCE, 16, (0xFFFF, 0, 0, 0), DxgiFormat.R16_UNORM),
    (DDS_LUMINANCE, 16, (0xFF, 0, 0, 0xFF00), DxgiFormat.R8G8_UNORM),
    (DDS_ALPHA, 8, (0, 0, 0, 0xFF), DxgiFormat.A8_UNORM),
    (DDS_ALPHA, 16, (0, 0, 0, 0xFFFF), DxgiFormat.UNKNOWN),
    (DDS_BUMPDUDV, 16, (0x00FF, 0xFF00, 0, 0), DxgiFormat.R8G8_SNORM),
    (DDS_BUMPDUDV, 32, (0xFF, 0xFF00, 0xFF0000, 0xFF000000), DxgiFormat.R8G8B8A8_SNORM),
    (DDS_BUMPDUDV, 32, (0xFFFF, 0xFFFF0000, 0, 0), DxgiFormat.R16G16_SNORM),
    (0, 32, (0xFF, 0xFF00, 0xFF0000, 0xFF000000), DxgiFormat.UNKNOWN),
])
def test_other_flag_formats(flags, bits, masks, expected):
    assert dxgi_format_from_pixel_format(_pixel_format(flags, 0, bits, masks)) == expected


@pytest.mark.parametrize("fourcc,expected", [
    (make_fourcc("DXT1"), DxgiFormat.BC1_UNORM),
    (make_fourcc("DXT2"), DxgiFormat.BC2_UNORM),
    (make_fourcc("DXT3"), DxgiFormat.BC2_UNORM),
    (make_fourcc("DXT4"), DxgiFormat.BC3_UNORM),
    (make_fourcc("DXT5"), DxgiFormat.BC3_UNORM),
    (make_fourcc("ATI1"), DxgiFormat.BC4_UNORM),
    (make_fourcc("BC4S"), DxgiFormat.BC4_SNORM),
    (make_fourcc("ATI2"), DxgiFormat.BC5_UNORM),
    (make_fourcc("BC5S"), DxgiFormat.BC5_SNORM),
    (make_fourcc("RGBG"), DxgiFormat.R8G8_B8G8_UNORM),
    (make_fourcc("GRGB"), DxgiFormat.G8R8_G8B8_UNORM),
    (make_fourcc("YUY2"), DxgiFormat.YUY2),
    (36, DxgiFormat.R16G16B16A16_UNORM),
    (110, DxgiFormat.R16G16B16A16_SNORM),
    (111, DxgiFormat.R16_FLOAT),
    (112, DxgiFormat.R16G16_FLOAT),
    (113, DxgiFormat.R16G16B16A16_FLOAT),
    (114, DxgiFormat.R32_FLOAT),
    (115, DxgiFormat.R32G32_FLOAT),
    (116, DxgiFormat.R32G32B32A32_FLOAT),
    (make_fourcc("ZZZZ"), DxgiFormat.UNKNOWN),
])
def test_fourcc_formats(fourcc, expected):
    assert dxgi_format_from_pixel_format(_pixel_format(DDS_FOURCC, fourcc)) == expected


@pytest.mark.parametrize("code,expected", [
    ("DXT2", AlphaMode.PREMULTIPLIED),
    ("DXT4", AlphaMode.PREMULTIPLIED),
    ("DXT1", AlphaMode.UNKNOWN),
    ("DXT5", AlphaMode.UNKNOWN),
])
def test_alpha_mode_legacy(code, expected):
    header = _header(_pixel_format(DDS_FOURCC, make_fourcc(code)))
    assert alpha_mode(header, None) == expected


@pytest.mark.parametrize("flags2,expected", [
    (0, AlphaMode.UNKNOWN),
    (1, AlphaMode.STRAIGHT),
    (2, AlphaMode.PREMULTIPLIED),
    (3, AlphaMode.OPAQUE),
    (4, AlphaMode.CUSTOM),
    (5, AlphaMode.UNKNOWN),
    (0x8 | 2, AlphaMode.PREMULTIPLIED),
])
def test_alpha_mode_dx10(flags2, expected):
    header = _header(_pixel_format(DDS_FOURCC, make_fourcc("DX10")))
    dxt10 = DdsHeaderDxt10(DxgiFormat.R8G8B8A8_UNORM, 3, 0, 1, flags2)
    assert alpha_mode(header, dxt10) == expected


def test_alpha_mode_without_fourcc_flag():
    header = _header(_pixel_format(DDS_RGB, make_fourcc("DXT2"), 32))
    assert alpha_mode(header, None) == AlphaMode.UNKNOWN


def test_alpha_mode_from_parsed_file():
    pf = _pixel_format(DDS_FOURCC, make_fourcc("DX10"))
    header, dxt10, _ = parse_dds(
        _build(pf=pf, dxt10=(int(DxgiFormat.BC3_UNORM), 3, 0, 1, 3)))
    assert alpha_mode(header, dxt10) == AlphaMode.OPAQUE