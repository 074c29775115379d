"""Turning parsed DDS data into a texture description with its subresources."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import IntEnum, IntFlag
from typing import NamedTuple

from ddsmesh.dds_header import (
    DDS_CUBEMAP,
    DDS_CUBEMAP_ALLFACES,
    DDS_HEADER_FLAGS_VOLUME,
    DDS_HEIGHT,
    AlphaMode,
    DdsError,
    DdsHeader,
    DdsHeaderDxt10,
    alpha_mode,
    dxgi_format_from_pixel_format,
    parse_dds,
)
from ddsmesh.formats import (
    DxgiFormat,
    bits_per_pixel,
    count_mips,
    is_depth_stencil,
    make_srgb,
    plane_count,
    surface_info,
)

F = DxgiFormat

# Hardware limits a loaded texture must respect.
REQ_MIP_LEVELS = 15
REQ_TEXTURE1D_ARRAY_AXIS_DIMENSION = 2048
REQ_TEXTURE1D_U_DIMENSION = 16384
REQ_TEXTURE2D_ARRAY_AXIS_DIMENSION = 2048
REQ_TEXTURE2D_U_OR_V_DIMENSION = 16384
REQ_TEXTURECUBE_DIMENSION = 16384
REQ_TEXTURE3D_U_V_OR_W_DIMENSION = 2048
REQ_SUBRESOURCES = 30720

_RESOURCE_MISC_TEXTURECUBE = 0x4
_MAX_FILE_SIZE = 1 << 32


class LoaderFlags(IntFlag):
    """Options that change how a texture is loaded."""

    DEFAULT = 0
    FORCE_SRGB = 0x1
    MIP_RESERVE = 0x8


class ResourceDimension(IntEnum):
    """Dimension of a texture resource."""

    UNKNOWN = 0
    BUFFER = 1
    TEXTURE1D = 2
    TEXTURE2D = 3
    TEXTURE3D = 4


@dataclass(frozen=True)
class Subresource:
    """One mip level of one array slice (and plane) of a texture."""

    offset: int
    row_pitch: int
    slice_pitch: int
    data: bytes


@dataclass(frozen=True)
class Texture:
    """Description of a texture ready for upload, with its initial data."""

    dimension: ResourceDimension
    format: int
    width: int
    height: int
    depth: int
    mip_levels: int
    array_size: int
    is_cube_map: bool
    subresources: tuple[Subresource, ...]
    alpha_mode: AlphaMode = AlphaMode.UNKNOWN


class _InitData(NamedTuple):
    width: int
    height: int
    depth: int
    skip_mip: int
    subresources: tuple[Subresource, ...]


def _subresource(bit_data: bytes, offset: int, row_pitch: int, slice_pitch: int,
                 fmt: int, height: int, depth: int, plane: int) -> Subresource:
    if fmt in (F.NV12, F.P010, F.P016):
        if plane == 0:
            slice_pitch = row_pitch * height
        else:
            offset += row_pitch * height
            slice_pitch = row_pitch * ((height + 1) >> 1)
    elif fmt == F.NV11:
        if plane == 0:
            slice_pitch = row_pitch * height
        else:
            offset += row_pitch * height
            row_pitch >>= 1
            slice_pitch = row_pitch * height
    data = bytes(bit_data[offset:offset + slice_pitch * depth])
    return Subresource(offset, row_pitch, slice_pitch, data)


def fill_init_data(width, height, depth, mip_count, array_size, planes, fmt,
                   max_size, bit_data) -> _InitData:
    """Lay out the subresources found in bit_data, skipping mips larger than max_size.

    Returns the size of the first kept mip, the number of skipped mips and the
    subresources.
    """
    if bit_data is None:
        raise DdsError("no pixel data")
    end = len(bit_data)
    subresources: list[Subresource] = []
    skip_mip = 0
    twidth = theight = tdepth = 0

    for plane in range(planes):
        src = 0
        for item in range(array_size):
            w, h, d = width, height, depth
            for _ in range(mip_count):
                info = surface_info(w, h, fmt)
                fits = w <= max_size and h <= max_size and d <= max_size
                if mip_count <= 1 or not max_size or fits:
                    if not twidth:
                        twidth, theight, tdepth = w, h, d
                    subresources.append(_subresource(
                        bit_data, src, info.row_bytes, info.num_bytes, fmt, h, d, plane))
                elif item == 0:
                    skip_mip += 1

                size = info.num_bytes * d
                if src + size > end:
                    raise DdsError("pixel data ends before the last surface")
                src += size

                w, h, d = max(w >> 1, 1), max(h >> 1, 1), max(d >> 1, 1)

    if not subresources:
        raise DdsError("no surfaces fit the requested size")
    return _InitData(twidth, theight, tdepth, skip_mip, tuple(subresources))


def _dx10_layout(header: DdsHeader, dxt10: DdsHeaderDxt10):
    width, height, depth = header.width, header.height, header.depth
    array_size = dxt10.array_size
    if array_size == 0:
        raise DdsError("DX10 header declares an array size of 0")

    fmt = dxt10.dxgi_format
    if fmt in (F.AI44, F.IA44, F.P8, F.A8P8) or bits_per_pixel(fmt) == 0:
        raise DdsError(f"format {fmt!r} is not supported")

    is_cube = False
    dimension = dxt10.resource_dimension
    if dimension == ResourceDimension.TEXTURE1D:
        if header.flags & DDS_HEIGHT and height != 1:
            raise DdsError("a 1D texture must have a height of 1")
        height = depth = 1
    elif dimension == ResourceDimension.TEXTURE2D:
        if dxt10.misc_flag & _RESOURCE_MISC_TEXTURECUBE:
            array_size *= 6
            is_cube = True
        depth = 1
    elif dimension == ResourceDimension.TEXTURE3D:
        if not header.flags & DDS_HEADER_FLAGS_VOLUME:
            raise DdsError("a 3D texture must carry the volume flag")
        if array_size > 1:
            raise DdsError("3D texture arrays are not supported")
    else:
        raise DdsError(f"resource dimension {dimension} is not supported")

    return ResourceDimension(dimension), fmt, width, height, depth, array_size, is_cube


def _legacy_layout(header: DdsHeader):
    width, height, depth = header.width, header.height, header.depth
    fmt = dxgi_format_from_pixel_format(header.pixel_format)
    if fmt == F.UNKNOWN:
        raise DdsError("pixel format is not supported")

    array_size = 1
    is_cube = False
    if header.flags & DDS_HEADER_FLAGS_VOLUME:
        dimension = ResourceDimension.TEXTURE3D
    else:
        if header.caps2 & DDS_CUBEMAP:
            if header.caps2 & DDS_CUBEMAP_ALLFACES != DDS_CUBEMAP_ALLFACES:
                raise DdsError("a cube map must define all six faces")
            array_size = 6
            is_cube = True
        depth = 1
        dimension = ResourceDimension.TEXTURE2D
    return dimension, fmt, width, height, depth, array_size, is_cube


def _check_bounds(dimension, width, height, depth, array_size, is_cube) -> None:
    if dimension == ResourceDimension.TEXTURE1D:
        too_big = (array_size > REQ_TEXTURE1D_ARRAY_AXIS_DIMENSION
                   or width > REQ_TEXTURE1D_U_DIMENSION)
    elif dimension == ResourceDimension.TEXTURE2D:
        limit = REQ_TEXTURECUBE_DIMENSION if is_cube else REQ_TEXTURE2D_U_OR_V_DIMENSION
        too_big = (array_size > REQ_TEXTURE2D_ARRAY_AXIS_DIMENSION
                   or width > limit or height > limit)
    elif dimension == ResourceDimension.TEXTURE3D:
        limit = REQ_TEXTURE3D_U_V_OR_W_DIMENSION
        too_big = array_size > 1 or width > limit or height > limit or depth > limit
    else:
        raise DdsError(f"resource dimension {dimension} is not supported")
    if too_big:
        raise DdsError("texture exceeds the supported dimensions")


def create_texture_from_dds(header, dxt10, bit_data, max_size=0,
                            load_flags=LoaderFlags.DEFAULT) -> Texture:
    """Validate a parsed DDS header and build the texture it describes."""
    mip_count = header.mip_map_count or 1

    if header.pixel_format.is_dx10:
        if dxt10 is None:
            raise DdsError("missing DX10 extension header")
        layout = _dx10_layout(header, dxt10)
    else:
        layout = _legacy_layout(header)
    dimension, fmt, width, height, depth, array_size, is_cube = layout

    if mip_count > REQ_MIP_LEVELS:
        raise DdsError("too many mip levels")
    _check_bounds(dimension, width, height, depth, array_size, is_cube)

    planes = plane_count(fmt)
    if not planes:
        raise DdsError(f"format {fmt!r} has no planes")
    if planes > 1 and is_depth_stencil(fmt):
        raise DdsError("multi-plane depth-stencil formats are not supported")

    resources = 1 if dimension == ResourceDimension.TEXTURE3D else array_size
    if resources * mip_count * planes > REQ_SUBRESOURCES:
        raise DdsError("texture has too many subresources")

    init = fill_init_data(width, height, depth, mip_count, array_size,
                          planes, fmt, max_size, bit_data)

    reserved_mips = mip_count
    if load_flags & LoaderFlags.MIP_RESERVE:
        reserved_mips = min(REQ_MIP_LEVELS, count_mips(width, height))

    if load_flags & LoaderFlags.FORCE_SRGB:
        fmt = make_srgb(fmt)

    return Texture(
        dimension=dimension,
        format=fmt,
        width=init.width,
        height=init.height,
        depth=init.depth if dimension == ResourceDimension.TEXTURE3D else 1,
        mip_levels=reserved_mips - init.skip_mip,
        array_size=1 if dimension == ResourceDimension.TEXTURE3D else array_size,
        is_cube_map=is_cube,
        subresources=init.subresources,
    )


def load_dds_from_memory(data, max_size=0, load_flags=LoaderFlags.DEFAULT) -> Texture:
    """Load a texture from the bytes of a DDS file."""
    header, dxt10, bit_data = parse_dds(data)
    texture = create_texture_from_dds(header, dxt10, bit_data, max_size, load_flags)
    return replace(texture, alpha_mode=alpha_mode(header, dxt10))


def load_dds_from_file(path, max_size=0, load_flags=LoaderFlags.DEFAULT) -> Texture:
    """Load a texture from a DDS file on disk."""
    if os.path.getsize(path) >= _MAX_FILE_SIZE:
        raise DdsError("file is too large")
    with open(path, "rb") as stream:
        data = stream.read()
    return load_dds_from_memory(data, max_size, load_flags)