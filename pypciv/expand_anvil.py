import logging
import numpy as np
from pypciv.cloudtypes import (
    CONVECTIVE_CORE,
    ICE_UNCLASSIFIED,
    ANVIL,
    THRESH_HOMOGENEOUS_FREEZING,
    IWC_CONTINUITY_FACTOR,
)
from pypciv.pcfunctions import find_parent_iwc


def expand_anvil_step(grid):
    """
    Grow anvil cirrus by one pixel from convective cores and existing anvils.

    Every unclassified ice pixel that touches a source pixel (4-connectivity) becomes anvil if
    it is colder than the homogeneous freezing threshold and its ice water content does not
    exceed IWC_CONTINUITY_FACTOR times that of at least one of those sources.
    All decisions are made from the input snapshot, so the result does not depend on the
    order in which sources or neighbors are visited.

    Args:
        grid: CurtainGrid
            Curtain snapshot at the start of the iteration.

    Returns:
        new_grid: CurtainGrid
            Curtain snapshot at the start of the next iteration.
        changed: bool
            True if at least one pixel became anvil.
    """
    logger = logging.getLogger(__name__)

    cloudtype = grid.cloudtype
    temperature = grid.temperature
    iwc = grid.iwc

    # Sources are convective cores and anvils identified in previous iterations
    source_flag = (cloudtype == CONVECTIVE_CORE) | (cloudtype == ANVIL)

    # Physical constraint 1: cold enough for the ice to come from homogeneous freezing
    cold_flag = temperature < THRESH_HOMOGENEOUS_FREEZING
    # Physical constraint 2: IWC continuity with the best neighboring source.
    # A pixel qualifies if any source qualifies, so only the largest source IWC matters.
    parent_iwc = find_parent_iwc(iwc, source_flag)
    continuity_flag = iwc <= parent_iwc * IWC_CONTINUITY_FACTOR

    expansion_flag = (cloudtype == ICE_UNCLASSIFIED) & cold_flag & continuity_flag

    new_cloudtype = np.copy(cloudtype)
    new_cloudtype[expansion_flag] = ANVIL
    nexpanded = np.count_nonzero(expansion_flag)
    logger.debug(f"Expanded anvil into {nexpanded} pixels from {np.count_nonzero(source_flag)} sources")

    new_grid = grid.advance(new_cloudtype, expansion_flag)
    return new_grid, bool(nexpanded > 0)
