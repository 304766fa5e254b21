import logging
import numpy as np
from pypciv.cloudtypes import ICE_UNCLASSIFIED, INSITU, THRESH_HOMOGENEOUS_FREEZING


def classify_insitu(grid):
    """
    Classify the ice left over after anvil expansion stalls.

    Unclassified ice colder than the homogeneous freezing threshold was not reached from any
    convective core and becomes in-situ cirrus. Warmer unclassified ice is left as it is.

    Args:
        grid: CurtainGrid
            Curtain snapshot after the last anvil expansion.

    Returns:
        new_grid: CurtainGrid
            Final curtain snapshot.
        progressed: bool
            True if at least one pixel became in-situ cirrus.
    """
    logger = logging.getLogger(__name__)

    insitu_flag = (grid.cloudtype == ICE_UNCLASSIFIED) & (grid.temperature < THRESH_HOMOGENEOUS_FREEZING)
    ninsitu = np.count_nonzero(insitu_flag)

    new_cloudtype = np.copy(grid.cloudtype)
    new_cloudtype[insitu_flag] = INSITU

    nleft = np.count_nonzero(new_cloudtype == ICE_UNCLASSIFIED)
    logger.info(f"Classified {ninsitu} in-situ cirrus pixels, {nleft} warm ice pixels left unclassified")

    new_grid = grid.advance(new_cloudtype, insitu_flag)
    return new_grid, bool(ninsitu > 0)
