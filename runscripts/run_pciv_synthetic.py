import sys
import logging
from pypciv.pc_utilities import load_config, setup_logging
from pypciv.pciv_driver import run_pciv_classification

# Purpose: Main script for classifying anvil and in-situ cirrus on a synthetic curtain

if __name__ == '__main__':

    # Set the logging message level
    setup_logging()
    logger = logging.getLogger(__name__)

    if len(sys.argv) < 2:
        sys.exit(f"Usage: python {sys.argv[0]} config.yml")

    # Load configuration file
    config_file = sys.argv[1]
    config = load_config(config_file)

    outfile = run_pciv_classification(config)
    if outfile is not None:
        logger.info(f"Classification written to {outfile}")
