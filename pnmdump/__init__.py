"""pnmdump: grayscale PGM conversion and transform tool.

Converts PGM rasters between the textual (P2) and binary (P5) encodings and
applies geometric transforms while doing so: diagonal reflection, clockwise
90 degree rotation, nearest-neighbour scaling and bilinear/box scaling.

Architecture layers (strict one-way dependency):
    cli -> raster/{converter} -> raster/{codec,scale,sampler} -> raster/{image,errors} -> utils/

Key invariants:
    - Input rasters are at most 512x512, outputs at most 1920x1080
    - The whole input raster is held in memory; output samples are produced lazily
    - Samples are integers in [0, maxValue]
    - YAML-only configs
"""

__version__ = "1.0.0"
