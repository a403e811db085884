"""globeshape — flatten spherical block outlines into stitched SVG shapes."""

__version__ = "0.1.0"
