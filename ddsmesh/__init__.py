"""DDS texture parsing and layout, lit mesh normals and a key-state bit mask."""

__version__ = "0.1.0"

__all__ = ["dds_header", "dds_loader", "formats", "keys", "mesh"]