import numpy as np

from pgm_map_server.raster import RasterImage

OCCUPIED, FREE, UNKNOWN = 100, 0, -1


def classify(image: RasterImage, free_thresh: float, occupied_thresh: float) -> np.ndarray:
    """
    Trinary occupancy classification of a raster.

    Dark pixels (<= free_thresh) are occupied and bright pixels
    (>= occupied_thresh) are free; the threshold names read backwards but
    match the maps this package is fed. The first matching rule wins, so an
    inverted threshold pair never yields both.

    Returns:
        flat int8 array, row-major from the bottom-left pixel of the image
    """
    # image rows run top-down (Y+ down), map rows bottom-up (Y+ up)
    v = np.flipud(image.brightness)

    grid = np.full(v.shape, UNKNOWN, dtype=np.int8)
    grid[v >= occupied_thresh] = FREE
    grid[v <= free_thresh] = OCCUPIED
    return grid.ravel()
