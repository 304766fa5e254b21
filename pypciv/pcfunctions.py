import numpy as np
from scipy.ndimage import generate_binary_structure, maximum_filter
from pypciv.cloudtypes import CLOUDTYPE_NAMES, NCLOUDTYPES

# 4-connectivity offsets (dx, dy): down, up, right, left. y=0 is the top of the curtain.
NEIGHBOR_OFFSETS = ((0, 1), (0, -1), (1, 0), (-1, 0))


def get_neighbors(point, nx, ny):
    """
    Find the 4-connected neighbors of a pixel.

    Args:
        point: tuple
            Pixel position (x, y).
        nx: int
            Number of pixels in the x direction.
        ny: int
            Number of pixels in the y direction.

    Returns:
        next_points: list
            Neighboring (x, y) positions inside the curtain, in NEIGHBOR_OFFSETS order.
    """
    x, y = point
    next_points = []
    for dx, dy in NEIGHBOR_OFFSETS:
        nbx = x + dx
        nby = y + dy
        if nbx < 0 or nbx >= nx:
            continue
        if nby < 0 or nby >= ny:
            continue
        next_points.append((nbx, nby))
    return next_points


def find_parent_iwc(iwc, source_flag):
    """
    Get the largest ice water content among the 4-connected source neighbors of each pixel.

    Args:
        iwc: np.array
            Array containing ice water content.
        source_flag: np.array
            Boolean array flagging pixels allowed to expand into their neighbors.

    Returns:
        parent_iwc: np.array
            Maximum neighboring source IWC. Pixels without a source neighbor get -inf.
    """
    source_iwc = np.where(source_flag, iwc, -np.inf)
    # Cross-shaped footprint, same growth shape as a one pixel binary dilation
    footprint = generate_binary_structure(2, 1)
    # Exclude the pixel itself, only neighbors can be parents
    footprint[1, 1] = False
    parent_iwc = maximum_filter(source_iwc, footprint=footprint, mode="constant", cval=-np.inf)
    return parent_iwc


def count_cloudtypes(cloudtype):
    """
    Count the number of pixels in each cloud type.

    Args:
        cloudtype: np.array
            Array containing cloud type codes.

    Returns:
        counts: dictionary
            Number of pixels keyed by cloud type name, summing to the curtain size.
    """
    npix = np.bincount(np.ravel(cloudtype).astype(int), minlength=NCLOUDTYPES)
    counts = {name: int(npix[code]) for code, name in CLOUDTYPE_NAMES.items()}
    return counts
