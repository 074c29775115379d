"""DXGI pixel formats and the size arithmetic that goes with them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class DxgiFormat(IntEnum):
    """DXGI surface formats, with their numeric values as stored in DDS files."""

    UNKNOWN = 0
    R32G32B32A32_TYPELESS = 1
    R32G32B32A32_FLOAT = 2
    R32G32B32A32_UINT = 3
    R32G32B32A32_SINT = 4
    R32G32B32_TYPELESS = 5
    R32G32B32_FLOAT = 6
    R32G32B32_UINT = 7
    R32G32B32_SINT = 8
    R16G16B16A16_TYPELESS = 9
    R16G16B16A16_FLOAT = 10
    R16G16B16A16_UNORM = 11
    R16G16B16A16_UINT = 12
    R16G16B16A16_SNORM = 13
    R16G16B16A16_SINT = 14
    R32G32_TYPELESS = 15
    R32G32_FLOAT = 16
    R32G32_UINT = 17
    R32G32_SINT = 18
    R32G8X24_TYPELESS = 19
    D32_FLOAT_S8X24_UINT = 20
    R32_FLOAT_X8X24_TYPELESS = 21
    X32_TYPELESS_G8X24_UINT = 22
    R10G10B10A2_TYPELESS = 23
    R10G10B10A2_UNORM = 24
    R10G10B10A2_UINT = 25
    R11G11B10_FLOAT = 26
    R8G8B8A8_TYPELESS = 27
    R8G8B8A8_UNORM = 28
    R8G8B8A8_UNORM_SRGB = 29
    R8G8B8A8_UINT = 30
    R8G8B8A8_SNORM = 31
    R8G8B8A8_SINT = 32
    R16G16_TYPELESS = 33
    R16G16_FLOAT = 34
    R16G16_UNORM = 35
    R16G16_UINT = 36
    R16G16_SNORM = 37
    R16G16_SINT = 38
    R32_TYPELESS = 39
    D32_FLOAT = 40
    R32_FLOAT = 41
    R32_UINT = 42
    R32_SINT = 43
    R24G8_TYPELESS = 44
    D24_UNORM_S8_UINT = 45
    R24_UNORM_X8_TYPELESS = 46
    X24_TYPELESS_G8_UINT = 47
    R8G8_TYPELESS = 48
    R8G8_UNORM = 49
    R8G8_UINT = 50
    R8G8_SNORM = 51
    R8G8_SINT = 52
    R16_TYPELESS = 53
    R16_FLOAT = 54
    D16_UNORM = 55
    R16_UNORM = 56
    R16_UINT = 57
    R16_SNORM = 58
    R16_SINT = 59
    R8_TYPELESS = 60
    R8_UNORM = 61
    R8_UINT = 62
    R8_SNORM = 63
    R8_SINT = 64
    A8_UNORM = 65
    R1_UNORM = 66
    R9G9B9E5_SHAREDEXP = 67
    R8G8_B8G8_UNORM = 68
    G8R8_G8B8_UNORM = 69
    BC1_TYPELESS = 70
    BC1_UNORM = 71
    BC1_UNORM_SRGB = 72
    BC2_TYPELESS = 73
    BC2_UNORM = 74
    BC2_UNORM_SRGB = 75
    BC3_TYPELESS = 76
    BC3_UNORM = 77
    BC3_UNORM_SRGB = 78
    BC4_TYPELESS = 79
    BC4_UNORM = 80
    BC4_SNORM = 81
    BC5_TYPELESS = 82
    BC5_UNORM = 83
    BC5_SNORM = 84
    B5G6R5_UNORM = 85
    B5G5R5A1_UNORM = 86
    B8G8R8A8_UNORM = 87
    B8G8R8X8_UNORM = 88
    R10G10B10_XR_BIAS_A2_UNORM = 89
    B8G8R8A8_TYPELESS = 90
    B8G8R8A8_UNORM_SRGB = 91
    B8G8R8X8_TYPELESS = 92
    B8G8R8X8_UNORM_SRGB = 93
    BC6H_TYPELESS = 94
    BC6H_UF16 = 95
    BC6H_SF16 = 96
    BC7_TYPELESS = 97
    BC7_UNORM = 98
    BC7_UNORM_SRGB = 99
    AYUV = 100
    Y410 = 101
    Y416 = 102
    NV12 = 103
    P010 = 104
    P016 = 105
    OPAQUE_420 = 106
    YUY2 = 107
    Y210 = 108
    Y216 = 109
    NV11 = 110
    AI44 = 111
    IA44 = 112
    P8 = 113
    A8P8 = 114
    B4G4R4A4_UNORM = 115


F = DxgiFormat


def _group(bits: int, *formats: DxgiFormat) -> dict[int, int]:
    return {fmt: bits for fmt in formats}


_BITS_PER_PIXEL: dict[int, int] = {
    **_group(128, F.R32G32B32A32_TYPELESS, F.R32G32B32A32_FLOAT,
             F.R32G32B32A32_UINT, F.R32G32B32A32_SINT),
    **_group(96, F.R32G32B32_TYPELESS, F.R32G32B32_FLOAT,
             F.R32G32B32_UINT, F.R32G32B32_SINT),
    **_group(64, F.R16G16B16A16_TYPELESS, F.R16G16B16A16_FLOAT,
             F.R16G16B16A16_UNORM, F.R16G16B16A16_UINT, F.R16G16B16A16_SNORM,
             F.R16G16B16A16_SINT, F.R32G32_TYPELESS, F.R32G32_FLOAT,
             F.R32G32_UINT, F.R32G32_SINT, F.R32G8X24_TYPELESS,
             F.D32_FLOAT_S8X24_UINT, F.R32_FLOAT_X8X24_TYPELESS,
             F.X32_TYPELESS_G8X24_UINT, F.Y416, F.Y210, F.Y216),
    **_group(32, F.R10G10B10A2_TYPELESS, F.R10G10B10A2_UNORM,
             F.R10G10B10A2_UINT, F.R11G11B10_FLOAT, F.R8G8B8A8_TYPELESS,
             F.R8G8B8A8_UNORM, F.R8G8B8A8_UNORM_SRGB, F.R8G8B8A8_UINT,
             F.R8G8B8A8_SNORM, F.R8G8B8A8_SINT, F.R16G16_TYPELESS,
             F.R16G16_FLOAT, F.R16G16_UNORM, F.R16G16_UINT, F.R16G16_SNORM,
             F.R16G16_SINT, F.R32_TYPELESS, F.D32_FLOAT, F.R32_FLOAT,
             F.R32_UINT, F.R32_SINT, F.R24G8_TYPELESS, F.D24_UNORM_S8_UINT,
             F.R24_UNORM_X8_TYPELESS, F.X24_TYPELESS_G8_UINT,
             F.R9G9B9E5_SHAREDEXP, F.R8G8_B8G8_UNORM, F.G8R8_G8B8_UNORM,
             F.B8G8R8A8_UNORM, F.B8G8R8X8_UNORM,
             F.R10G10B10_XR_BIAS_A2_UNORM, F.B8G8R8A8_TYPELESS,
             F.B8G8R8A8_UNORM_SRGB, F.B8G8R8X8_TYPELESS,
             F.B8G8R8X8_UNORM_SRGB, F.AYUV, F.Y410, F.YUY2),
    **_group(24, F.P010, F.P016),
    **_group(16, F.R8G8_TYPELESS, F.R8G8_UNORM, F.R8G8_UINT, F.R8G8_SNORM,
             F.R8G8_SINT, F.R16_TYPELESS, F.R16_FLOAT, F.D16_UNORM,
             F.R16_UNORM, F.R16_UINT, F.R16_SNORM, F.R16_SINT,
             F.B5G6R5_UNORM, F.B5G5R5A1_UNORM, F.A8P8, F.B4G4R4A4_UNORM),
    **_group(12, F.NV12, F.OPAQUE_420, F.NV11),
    **_group(8, F.R8_TYPELESS, F.R8_UNORM, F.R8_UINT, F.R8_SNORM,
             F.R8_SINT, F.A8_UNORM, F.AI44, F.IA44, F.P8),
    **_group(1, F.R1_UNORM),
    **_group(4, F.BC1_TYPELESS, F.BC1_UNORM, F.BC1_UNORM_SRGB,
             F.BC4_TYPELESS, F.BC4_UNORM, F.BC4_SNORM),
    **_group(8, F.BC2_TYPELESS, F.BC2_UNORM, F.BC2_UNORM_SRGB,
             F.BC3_TYPELESS, F.BC3_UNORM, F.BC3_UNORM_SRGB,
             F.BC5_TYPELESS, F.BC5_UNORM, F.BC5_SNORM,
             F.BC6H_TYPELESS, F.BC6H_UF16, F.BC6H_SF16,
             F.BC7_TYPELESS, F.BC7_UNORM, F.BC7_UNORM_SRGB),
}

# Bytes per 4x4 block for block-compressed formats.
_BLOCK_BYTES: dict[int, int] = {
    **_group(8, F.BC1_TYPELESS, F.BC1_UNORM, F.BC1_UNORM_SRGB,
             F.BC4_TYPELESS, F.BC4_UNORM, F.BC4_SNORM),
    **_group(16, F.BC2_TYPELESS, F.BC2_UNORM, F.BC2_UNORM_SRGB,
             F.BC3_TYPELESS, F.BC3_UNORM, F.BC3_UNORM_SRGB,
             F.BC5_TYPELESS, F.BC5_UNORM, F.BC5_SNORM,
             F.BC6H_TYPELESS, F.BC6H_UF16, F.BC6H_SF16,
             F.BC7_TYPELESS, F.BC7_UNORM, F.BC7_UNORM_SRGB),
}

# Bytes per pair of pixels for packed formats.
_PACKED_BYTES: dict[int, int] = {
    **_group(4, F.R8G8_B8G8_UNORM, F.G8R8_G8B8_UNORM, F.YUY2),
    **_group(8, F.Y210, F.Y216),
}

_PLANAR_BYTES: dict[int, int] = {
    **_group(2, F.NV12, F.OPAQUE_420),
    **_group(4, F.P010, F.P016),
}

_SRGB: dict[int, DxgiFormat] = {
    F.R8G8B8A8_UNORM: F.R8G8B8A8_UNORM_SRGB,
    F.BC1_UNORM: F.BC1_UNORM_SRGB,
    F.BC2_UNORM: F.BC2_UNORM_SRGB,
    F.BC3_UNORM: F.BC3_UNORM_SRGB,
    F.B8G8R8A8_UNORM: F.B8G8R8A8_UNORM_SRGB,
    F.B8G8R8X8_UNORM: F.B8G8R8X8_UNORM_SRGB,
    F.BC7_UNORM: F.BC7_UNORM_SRGB,
}

_DEPTH_STENCIL = frozenset({
    F.R32G8X24_TYPELESS, F.D32_FLOAT_S8X24_UINT, F.R32_FLOAT_X8X24_TYPELESS,
    F.X32_TYPELESS_G8X24_UINT, F.D32_FLOAT, F.R24G8_TYPELESS,
    F.D24_UNORM_S8_UINT, F.R24_UNORM_X8_TYPELESS, F.X24_TYPELESS_G8_UINT,
    F.D16_UNORM,
})

# Formats whose data is split into two planes (depth + stencil, or luma + chroma).
_TWO_PLANES = frozenset({
    F.NV12, F.P010, F.P016, F.OPAQUE_420, F.NV11,
    F.R32G8X24_TYPELESS, F.D32_FLOAT_S8X24_UINT, F.R32_FLOAT_X8X24_TYPELESS,
    F.X32_TYPELESS_G8X24_UINT, F.R24G8_TYPELESS, F.D24_UNORM_S8_UINT,
    F.R24_UNORM_X8_TYPELESS, F.X24_TYPELESS_G8_UINT,
})


@dataclass(frozen=True)
class SurfaceInfo:
    """Byte layout of one surface: total bytes, bytes per row, number of rows."""

    num_bytes: int
    row_bytes: int
    num_rows: int


def bits_per_pixel(fmt: int) -> int:
    """Bits per pixel of a format, or 0 for unknown formats."""
    return _BITS_PER_PIXEL.get(fmt, 0)


def surface_info(width: int, height: int, fmt: int) -> SurfaceInfo:
    """Compute the memory layout of a width x height surface in the given format."""
    if fmt in _BLOCK_BYTES:
        bpe = _BLOCK_BYTES[fmt]
        blocks_wide = max(1, (width + 3) // 4) if width > 0 else 0
        blocks_high = max(1, (height + 3) // 4) if height > 0 else 0
        row_bytes = blocks_wide * bpe
        return SurfaceInfo(row_bytes * blocks_high, row_bytes, blocks_high)

    if fmt in _PACKED_BYTES:
        row_bytes = ((width + 1) >> 1) * _PACKED_BYTES[fmt]
        return SurfaceInfo(row_bytes * height, row_bytes, height)

    if fmt == F.NV11:
        row_bytes = ((width + 3) >> 2) * 4
        num_rows = height * 2
        return SurfaceInfo(row_bytes * num_rows, row_bytes, num_rows)

    if fmt in _PLANAR_BYTES:
        row_bytes = ((width + 1) >> 1) * _PLANAR_BYTES[fmt]
        num_bytes = row_bytes * height + ((row_bytes * height + 1) >> 1)
        num_rows = height + ((height + 1) >> 1)
        return SurfaceInfo(num_bytes, row_bytes, num_rows)

    row_bytes = (width * bits_per_pixel(fmt) + 7) // 8
    return SurfaceInfo(row_bytes * height, row_bytes, height)


def make_srgb(fmt: int) -> int:
    """Return the sRGB variant of a format, or the format itself if it has none."""
    return _SRGB.get(fmt, fmt)


def is_depth_stencil(fmt: int) -> bool:
    """Whether the format is a depth or depth-stencil format."""
    return fmt in _DEPTH_STENCIL


def plane_count(fmt: int) -> int:
    """Number of data planes of a format; 0 for unknown formats."""
    if bits_per_pixel(fmt) == 0:
        return 0
    return 2 if fmt in _TWO_PLANES else 1


def count_mips(width: int, height: int) -> int:
    """Number of mip levels in a full chain down to 1x1; 0 for an empty surface."""
    if width == 0 or height == 0:
        return 0
    count = 1
    while width > 1 or height > 1:
        width >>= 1
        height >>= 1
        count += 1
    return count