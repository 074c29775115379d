"""Parsing of DDS file headers and mapping of legacy pixel formats to DXGI."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from ddsmesh.formats import DxgiFormat

F = DxgiFormat

# Pixel format flags.
DDS_FOURCC = 0x00000004
DDS_RGB = 0x00000040
DDS_LUMINANCE = 0x00020000
DDS_ALPHA = 0x00000002
DDS_BUMPDUDV = 0x00080000

# Header flags.
DDS_HEADER_FLAGS_VOLUME = 0x00800000
DDS_HEIGHT = 0x00000002
DDS_WIDTH = 0x00000004

# caps2 cube map flags.
DDS_CUBEMAP_POSITIVEX = 0x00000600
DDS_CUBEMAP_NEGATIVEX = 0x00000A00
DDS_CUBEMAP_POSITIVEY = 0x00001200
DDS_CUBEMAP_NEGATIVEY = 0x00002200
DDS_CUBEMAP_POSITIVEZ = 0x00004200
DDS_CUBEMAP_NEGATIVEZ = 0x00008200
DDS_CUBEMAP_ALLFACES = (
    DDS_CUBEMAP_POSITIVEX | DDS_CUBEMAP_NEGATIVEX
    | DDS_CUBEMAP_POSITIVEY | DDS_CUBEMAP_NEGATIVEY
    | DDS_CUBEMAP_POSITIVEZ | DDS_CUBEMAP_NEGATIVEZ
)
DDS_CUBEMAP = 0x00000200

DDS_MISC_FLAGS2_ALPHA_MODE_MASK = 0x7

MAGIC_SIZE = 4
PIXEL_FORMAT_SIZE = 32
HEADER_SIZE = 124
DXT10_HEADER_SIZE = 20

_HEADER_STRUCT = struct.Struct("<7I44x8I5I")
_DXT10_STRUCT = struct.Struct("<5I")


class DdsError(ValueError):
    """Raised when DDS data is malformed or not supported."""


class AlphaMode(IntEnum):
    """How the alpha channel of a texture is to be interpreted."""

    UNKNOWN = 0
    STRAIGHT = 1
    PREMULTIPLIED = 2
    OPAQUE = 3
    CUSTOM = 4


def make_fourcc(code: str | bytes) -> int:
    """Pack a four-character code into a little-endian 32-bit integer."""
    raw = code.encode("latin-1") if isinstance(code, str) else bytes(code)
    if len(raw) != 4:
        raise ValueError(f"a four-character code needs exactly 4 characters, got {code!r}")
    return int.from_bytes(raw, "little")


DDS_MAGIC = make_fourcc("DDS ")
_DX10 = make_fourcc("DX10")


@dataclass(frozen=True)
class DdsPixelFormat:
    """The DDS_PIXELFORMAT block of a DDS header."""

    size: int
    flags: int
    fourcc: int
    rgb_bit_count: int
    r_mask: int
    g_mask: int
    b_mask: int
    a_mask: int

    def _masks(self) -> tuple[int, int, int, int]:
        return (self.r_mask, self.g_mask, self.b_mask, self.a_mask)

    @property
    def is_dx10(self) -> bool:
        """Whether this pixel format announces a DX10 extension header."""
        return bool(self.flags & DDS_FOURCC) and self.fourcc == _DX10


@dataclass(frozen=True)
class DdsHeader:
    """The main DDS_HEADER block that follows the magic number."""

    size: int
    flags: int
    height: int
    width: int
    pitch_or_linear_size: int
    depth: int
    mip_map_count: int
    pixel_format: DdsPixelFormat
    caps: int
    caps2: int
    caps3: int
    caps4: int


@dataclass(frozen=True)
class DdsHeaderDxt10:
    """The DX10 extension header; present when the fourcc is 'DX10'."""

    dxgi_format: int
    resource_dimension: int
    misc_flag: int
    array_size: int
    misc_flags2: int


def _as_format(value: int) -> int:
    try:
        return DxgiFormat(value)
    except ValueError:
        return value


def parse_dds(data: bytes) -> tuple[DdsHeader, DdsHeaderDxt10 | None, bytes]:
    """Validate DDS data and split it into header, optional DX10 header and pixel bytes."""
    data = bytes(data)
    if len(data) < MAGIC_SIZE + HEADER_SIZE:
        raise DdsError("data is too short to hold a DDS header")
    if int.from_bytes(data[:MAGIC_SIZE], "little") != DDS_MAGIC:
        raise DdsError("missing DDS magic number")

    fields = _HEADER_STRUCT.unpack_from(data, MAGIC_SIZE)
    pixel_format = DdsPixelFormat(*fields[7:15])
    caps, caps2, caps3, caps4, _reserved2 = fields[15:20]
    header = DdsHeader(*fields[:7], pixel_format, caps, caps2, caps3, caps4)

    if header.size != HEADER_SIZE or pixel_format.size != PIXEL_FORMAT_SIZE:
        raise DdsError("DDS header has an invalid size")

    offset = MAGIC_SIZE + HEADER_SIZE
    dxt10 = None
    if pixel_format.is_dx10:
        if len(data) < offset + DXT10_HEADER_SIZE:
            raise DdsError("data is too short to hold the DX10 extension header")
        fmt, dimension, misc, array_size, misc2 = _DXT10_STRUCT.unpack_from(data, offset)
        dxt10 = DdsHeaderDxt10(_as_format(fmt), dimension, misc, array_size, misc2)
        offset += DXT10_HEADER_SIZE

    return header, dxt10, data[offset:]


_RGB_32 = (
    ((0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000), F.R8G8B8A8_UNORM),
    ((0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000), F.B8G8R8A8_UNORM),
    ((0x00FF0000, 0x0000FF00, 0x000000FF, 0x00000000), F.B8G8R8X8_UNORM),
    # Red and blue masks are swapped by many writers for 10:10:10:2 data.
    ((0x3FF00000, 0x000FFC00, 0x000003FF, 0xC0000000), F.R10G10B10A2_UNORM),
    ((0x0000FFFF, 0xFFFF0000, 0x00000000, 0x00000000), F.R16G16_UNORM),
    ((0xFFFFFFFF, 0x00000000, 0x00000000, 0x00000000), F.R32_FLOAT),
)

_RGB_16 = (
    ((0x7C00, 0x03E0, 0x001F, 0x8000), F.B5G5R5A1_UNORM),
    ((0xF800, 0x07E0, 0x001F, 0x0000), F.B5G6R5_UNORM),
    ((0x0F00, 0x00F0, 0x000F, 0xF000), F.B4G4R4A4_UNORM),
)

_LUMINANCE = {
    8: (
        ((0x000000FF, 0, 0, 0), F.R8_UNORM),
        ((0x000000FF, 0, 0, 0x0000FF00), F.R8G8_UNORM),
    ),
    16: (
        ((0x0000FFFF, 0, 0, 0), F.R16_UNORM),
        ((0x000000FF, 0, 0, 0x0000FF00), F.R8G8_UNORM),
    ),
}

_BUMPDUDV = {
    16: (((0x00FF, 0xFF00, 0, 0), F.R8G8_SNORM),),
    32: (
        ((0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000), F.R8G8B8A8_SNORM),
        ((0x0000FFFF, 0xFFFF0000, 0, 0), F.R16G16_SNORM),
    ),
}

_FOURCC_FORMATS = {
    make_fourcc("DXT1"): F.BC1_UNORM,
    make_fourcc("DXT3"): F.BC2_UNORM,
    make_fourcc("DXT5"): F.BC3_UNORM,
    make_fourcc("DXT2"): F.BC2_UNORM,
    make_fourcc("DXT4"): F.BC3_UNORM,
    make_fourcc("ATI1"): F.BC4_UNORM,
    make_fourcc("BC4U"): F.BC4_UNORM,
    make_fourcc("BC4S"): F.BC4_SNORM,
    make_fourcc("ATI2"): F.BC5_UNORM,
    make_fourcc("BC5U"): F.BC5_UNORM,
    make_fourcc("BC5S"): F.BC5_SNORM,
    make_fourcc("RGBG"): F.R8G8_B8G8_UNORM,
    make_fourcc("GRGB"): F.G8R8_G8B8_UNORM,
    make_fourcc("YUY2"): F.YUY2,
    # Legacy D3DFORMAT values stored directly in the fourcc field.
    36: F.R16G16B16A16_UNORM,
    110: F.R16G16B16A16_SNORM,
    111: F.R16_FLOAT,
    112: F.R16G16_FLOAT,
    113: F.R16G16B16A16_FLOAT,
    114: F.R32_FLOAT,
    115: F.R32G32_FLOAT,
    116: F.R32G32B32A32_FLOAT,
}


def _match(ddpf: DdsPixelFormat, table) -> DxgiFormat:
    masks = ddpf._masks()
    return next((fmt for expected, fmt in table if masks == expected), F.UNKNOWN)


def dxgi_format_from_pixel_format(ddpf: DdsPixelFormat) -> DxgiFormat:
    """Map a legacy DDS pixel format description to a DXGI format, or UNKNOWN."""
    if ddpf.flags & DDS_RGB:
        if ddpf.rgb_bit_count == 32:
            return _match(ddpf, _RGB_32)
        if ddpf.rgb_bit_count == 16:
            return _match(ddpf, _RGB_16)
        return F.UNKNOWN
    if ddpf.flags & DDS_LUMINANCE:
        return _match(ddpf, _LUMINANCE.get(ddpf.rgb_bit_count, ()))
    if ddpf.flags & DDS_ALPHA:
        return F.A8_UNORM if ddpf.rgb_bit_count == 8 else F.UNKNOWN
    if ddpf.flags & DDS_BUMPDUDV:
        return _match(ddpf, _BUMPDUDV.get(ddpf.rgb_bit_count, ()))
    if ddpf.flags & DDS_FOURCC:
        return _FOURCC_FORMATS.get(ddpf.fourcc, F.UNKNOWN)
    return F.UNKNOWN


def alpha_mode(header: DdsHeader, dxt10: DdsHeaderDxt10 | None) -> AlphaMode:
    """Determine the alpha mode declared by a DDS header."""
    ddpf = header.pixel_format
    if not ddpf.flags & DDS_FOURCC:
        return AlphaMode.UNKNOWN
    if ddpf.fourcc == _DX10:
        if dxt10 is None:
            return AlphaMode.UNKNOWN
        mode = dxt10.misc_flags2 & DDS_MISC_FLAGS2_ALPHA_MODE_MASK
        if AlphaMode.STRAIGHT <= mode <= AlphaMode.CUSTOM:
            return AlphaMode(mode)
        return AlphaMode.UNKNOWN
    if ddpf.fourcc in (make_fourcc("DXT2"), make_fourcc("DXT4")):
        return AlphaMode.PREMULTIPLIED
    return AlphaMode.UNKNOWN