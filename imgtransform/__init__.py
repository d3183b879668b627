"""Per-image transforms for kymograph and spot-measure analysis.

Modules
-------
config        Limits and defaults, overridable through IMGTRANSFORM_* environment variables.
image         Image: channel-last raster passed through every transform.
options       TransformOptions parameter bag, DistanceType.
errors        TransformError taxonomy and the TransformResult error-union.
cache         ArrayCache: memoized channel extraction, vectorised array helpers.
base          BaseTransform validation / execution template.
color         Linear combinations, colour dispersion, HSB / HSV / H1H2H3 projections.
deriche       Deriche recursive edge detector with non-maximum suppression.
sorting       Column and row sorts of kymographs.
difference    X / Y / XY window differences, vertical colour distance.
subtraction   Column, background and reference subtraction, horizontal-average removal.
threshold     Single-value and colour-palette binary masks.
registry      Ordered catalog of named transforms, transform-then-threshold pipeline.
utils         Image file I/O and logging setup for the command line.
"""
