import logging
import numpy as np
from pypciv.cloudtypes import CLEAR, CONVECTIVE_CORE, ICE_UNCLASSIFIED
from pypciv.curtain_grid import CurtainGrid

# Size of the reference curtain the synthetic scene is laid out on
REFERENCE_NX = 40
REFERENCE_NY = 25


def generate_synthetic_curtain(config):
    """
    Generate a synthetic CloudSat/CALIPSO-like curtain with a deep convective tower,
    its anvil outflow and a detached cirrus patch.

    The scene is laid out on a 40 x 25 reference curtain and stretched to the configured size.
    Temperature decreases linearly with height from -20 degC at the bottom to -80 degC at the
    top row (y=0).

    Args:
        config: dictionary
            Dictionary containing config parameters (nx, ny, random_seed).

    Returns:
        grid: CurtainGrid
            Initial curtain containing clear, convective core and unclassified ice pixels.
    """
    logger = logging.getLogger(__name__)

    nx = config.get("nx", REFERENCE_NX)
    ny = config.get("ny", REFERENCE_NY)
    random_seed = config.get("random_seed", None)
    rng = np.random.default_rng(random_seed)

    # Pixel positions on the reference curtain
    x2d, y2d = np.meshgrid(np.arange(nx), np.arange(ny))
    xref = x2d * REFERENCE_NX / nx
    yref = y2d * REFERENCE_NY / ny

    # Base atmosphere: y=0 is ~18 km (-80 degC), bottom row is ~5 km (-20 degC)
    temperature = -80.0 + (y2d / ny) * 60.0

    # Convective core (the seed)
    core_flag = ((xref > 10) & (xref < 14) & (yref > 10)) | ((xref > 11) & (xref < 13) & (yref > 5))
    # Anvil outflow, attached to the core but not yet classified
    outflow_flag = (
        ~core_flag
        & (xref >= 14) & (xref < 28)
        & (yref > 6) & (yref < 12 + (xref - 14) * 0.2)
        & (rng.random((ny, nx)) > 0.1)
    )
    # Distant in-situ cirrus, detached from the core
    insitu_flag = (
        (xref > 30) & (xref < 38)
        & (yref > 5) & (yref < 9)
        & (rng.random((ny, nx)) > 0.15)
    )

    cloudtype = np.full((ny, nx), CLEAR, dtype=int)
    iwc = np.zeros((ny, nx), dtype=float)

    ice_flag = (outflow_flag | insitu_flag) & ~core_flag
    cloudtype[ice_flag] = ICE_UNCLASSIFIED
    cloudtype[core_flag] = CONVECTIVE_CORE
    # IWC decreases away from the core in the outflow
    iwc[outflow_flag] = 500.0 - (xref[outflow_flag] - 14) * 30 + rng.random(np.count_nonzero(outflow_flag)) * 50
    insitu_only = insitu_flag & ~outflow_flag & ~core_flag
    iwc[insitu_only] = 100.0 + rng.random(np.count_nonzero(insitu_only)) * 50
    iwc[core_flag] = 1000.0
    iwc = np.maximum(iwc, 0.0)

    # Punch random holes in the clouds
    hole_flag = (cloudtype != CLEAR) & (rng.random((ny, nx)) > 0.95)
    cloudtype[hole_flag] = CLEAR

    logger.debug(
        f"Synthetic curtain {nx} x {ny}: {np.count_nonzero(cloudtype == CONVECTIVE_CORE)} core pixels, "
        f"{np.count_nonzero(cloudtype == ICE_UNCLASSIFIED)} ice pixels"
    )
    return CurtainGrid.from_initial(cloudtype, temperature, iwc)
