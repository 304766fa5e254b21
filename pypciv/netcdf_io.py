import os
import time
import logging
import numpy as np
import xarray as xr
from pypciv.cloudtypes import (
    CLOUDTYPE_NAMES,
    THRESH_HOMOGENEOUS_FREEZING,
    IWC_CONTINUITY_FACTOR,
)

# ----------------------------------------------------------------------------------
def write_pciv_classification(
        outfile,
        grid,
        iteration,
        config,
        **kwargs
):
    """
    Writes PCIV cloud classification of a curtain to netCDF file.

    **kwargs:
    Expects these optional arguments:
            status: string
            title: string
    """
    logger = logging.getLogger(__name__)

    counts = grid.statistics()
    flag_values = np.array(list(CLOUDTYPE_NAMES), dtype=np.int8)
    flag_meanings = " ".join(CLOUDTYPE_NAMES.values())

    # Define variables
    var_dict = {
        "cloudtype": (["y", "x"], grid.cloudtype),
        "temperature": (["y", "x"], grid.temperature),
        "iwc": (["y", "x"], grid.iwc),
        "just_changed": (["y", "x"], grid.just_changed.astype(np.int8)),
    }
    for name, npix in counts.items():
        var_dict[f"npix_{name}"] = ([], npix)

    # Define coordinates
    coord_dict = {
        "x": (["x"], np.arange(grid.nx)),
        "y": (["y"], np.arange(grid.ny)),
    }

    # Define global attributes
    gattr_dict = {
        "Title": kwargs.get("title", "PCIV anvil and in-situ cirrus classification"),
        "Created_on": time.ctime(time.time()),
        "iterations": iteration,
        "temperature_threshold": THRESH_HOMOGENEOUS_FREEZING,
        "iwc_continuity_factor": IWC_CONTINUITY_FACTOR,
    }
    if "status" in kwargs:
        gattr_dict["status"] = kwargs["status"]
    if config.get("random_seed") is not None:
        gattr_dict["random_seed"] = config["random_seed"]

    # Define xarray dataset
    ds_out = xr.Dataset(var_dict, coords=coord_dict, attrs=gattr_dict)

    # Specify variable attributes
    ds_out["x"].attrs["long_name"] = "Along-track pixel index"
    ds_out["x"].attrs["units"] = "unitless"

    ds_out["y"].attrs["long_name"] = "Vertical pixel index, 0 at the top of the curtain"
    ds_out["y"].attrs["units"] = "unitless"

    ds_out["cloudtype"].attrs["long_name"] = "PCIV cloud type"
    ds_out["cloudtype"].attrs["flag_values"] = flag_values
    ds_out["cloudtype"].attrs["flag_meanings"] = flag_meanings
    ds_out["cloudtype"].attrs["units"] = "unitless"

    ds_out["temperature"].attrs["long_name"] = "Air temperature"
    ds_out["temperature"].attrs["units"] = "degC"

    ds_out["iwc"].attrs["long_name"] = "Ice water content"
    ds_out["iwc"].attrs["units"] = "mg m-3"

    ds_out["just_changed"].attrs["long_name"] = "Flag of pixels classified in the last step"
    ds_out["just_changed"].attrs["units"] = "unitless"

    for name in counts:
        ds_out[f"npix_{name}"].attrs["long_name"] = f"Number of {name.replace('_', ' ')} pixels"
        ds_out[f"npix_{name}"].attrs["units"] = "unitless"

    # Delete file if it already exists
    if os.path.isfile(outfile):
        os.remove(outfile)

    # Set encoding/compression for all variables
    comp = dict(zlib=True)
    encoding = {var: comp for var in ds_out.data_vars if ds_out[var].ndim > 0}
    # Write to netcdf file
    ds_out.to_netcdf(path=outfile, mode="w", format="NETCDF4", encoding=encoding)
    logger.info(f"{outfile}")
    return outfile
