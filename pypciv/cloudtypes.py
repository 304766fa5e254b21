# Pixel cloud type codes used in the cloudtype array
CLEAR = 0
CONVECTIVE_CORE = 1  # Seed of the anvil expansion
ICE_UNCLASSIFIED = 2  # Candidate cirrus
ANVIL = 3  # Ice connected to a convective core
INSITU = 4  # Ice formed independently

CLOUDTYPE_NAMES = {
    CLEAR: "clear",
    CONVECTIVE_CORE: "convective_core",
    ICE_UNCLASSIFIED: "unclassified_ice",
    ANVIL: "anvil",
    INSITU: "insitu",
}
NCLOUDTYPES = len(CLOUDTYPE_NAMES)

# Cloud types allowed in a freshly initialized curtain
INITIAL_CLOUDTYPES = (CLEAR, CONVECTIVE_CORE, ICE_UNCLASSIFIED)

# Homogeneous ice nucleation temperature [degC]
THRESH_HOMOGENEOUS_FREEZING = -38.0
# Maximum IWC jump allowed between a source pixel and the pixel it expands into
IWC_CONTINUITY_FACTOR = 1.5
