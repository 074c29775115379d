# ddsmesh

Small, dependency-free helpers for DirectDraw Surface (DDS) textures and
simple lit meshes.

- `ddsmesh.formats`: the DXGI format table (`DxgiFormat`), `bits_per_pixel`,
  surface layout (`surface_info`, returning a `SurfaceInfo` with
  `num_bytes`, `row_bytes` and `num_rows`), `make_srgb`, `is_depth_stencil`,
  `plane_count` and `count_mips`.
- `ddsmesh.dds_header`: `parse_dds` checks the magic number and header
  sizes and returns the `DdsHeader`, the optional `DdsHeaderDxt10` and the
  pixel bytes; `dxgi_format_from_pixel_format` maps a legacy
  `DdsPixelFormat` to a `DxgiFormat`; `alpha_mode` reports an `AlphaMode`;
  `make_fourcc` packs a four-character code. Bad input raises `DdsError`
  (a `ValueError`).
- `ddsmesh.dds_loader`: `load_dds_from_memory` and `load_dds_from_file`
  validate a texture against fixed hardware limits (mip count, dimensions,
  array size, subresource count) and return a `Texture` with `dimension`
  (`ResourceDimension`), `format`, `width`, `height`, `depth`, `mip_levels`,
  `array_size`, `is_cube_map`, `alpha_mode` and a tuple of `Subresource`
  entries (`offset`, `row_pitch`, `slice_pitch`, `data`). A non-zero
  `max_size` drops mip levels larger than it. `LoaderFlags.FORCE_SRGB`
  switches the format to its sRGB variant; `LoaderFlags.MIP_RESERVE`
  reserves a full mip chain. `create_texture_from_dds` and `fill_init_data`
  are the lower-level steps.
- `ddsmesh.mesh`: per-vertex normals for triangle lists and strips
  (`triangle_list_normals`, `indexed_triangle_list_normals`,
  `triangle_strip_normals`, `calculate_vertex_normals` by `Topology`) and
  `sphere_mesh`, an indexed UV sphere returned as an `IlluminatedMesh`.
- `ddsmesh.keys`: `KeyState` tracks held keys (W, S, A, D, Q, E and space)
  as a `KeyInput` bit mask; `snapshot` returns the mask and clears the
  space (fire) bit.

## Installing

```
pip install ddsmesh
```

## Examples

Loading a texture:

```python
from ddsmesh.dds_loader import load_dds_from_file

texture = load_dds_from_file("grass.dds")
print(texture.format, texture.width, texture.height, texture.mip_levels)
for sub in texture.subresources:
    print(sub.offset, sub.row_pitch, sub.slice_pitch, len(sub.data))
```

Surface sizes for a block-compressed format:

```python
from ddsmesh.formats import DxgiFormat, surface_info

info = surface_info(256, 256, DxgiFormat.BC1_UNORM)
print(info.num_bytes, info.row_bytes, info.num_rows)
```

A sphere with smooth normals:

```python
from ddsmesh.mesh import sphere_mesh

sphere = sphere_mesh(2.0, 20, 20)
print(len(sphere.positions), len(sphere.indices))
```

Tracking pressed keys:

```python
from ddsmesh.keys import KeyState

keys = KeyState()
keys.key_down("W")
keys.key_down(" ")
print(keys.snapshot())   # W and SPACE
print(keys.snapshot())   # W only
```

## What it does not do

The package only describes textures and meshes as Python data. It does not
decompress block-compressed pixels, upload anything to a GPU or render.
`KeyState` only builds the key mask; the package has no network client,
no server and no game loop, and no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```