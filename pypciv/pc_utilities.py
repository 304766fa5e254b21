import os
import logging
import yaml


def setup_logging():
    """
    Set the logging message level

    Args:
        None.

    Returns:
        None.
    """
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)


def load_config(config_file):
    """
    Load configuration file, set paths and update the configuration dictionary.

    Args:
        config_file: string
            Path to a config file.

    Returns:
        config: dictionary
            Dictionary containing config parameters.
    """
    logger = logging.getLogger(__name__)
    # Read configuration from yaml file
    with open(config_file, "r") as stream:
        config = yaml.full_load(stream)
    if config is None:
        config = {}

    # Optional parameters (default values if not in config file)
    nx = config.get("nx", 40)
    ny = config.get("ny", 25)
    random_seed = config.get("random_seed", None)
    # Each iteration that does not stall classifies at least one pixel
    max_iterations = config.get("max_iterations", nx * ny)
    write_output = config.get("write_output", 1)
    root_path = config.get("root_path", "./")
    output_path_name = config.get("output_path_name", "pciv")
    output_filebase = config.get("output_filebase", "pciv_")

    # Set up output file location
    output_path = os.path.join(root_path, output_path_name) + "/"
    if write_output:
        os.makedirs(output_path, exist_ok=True)
    logger.debug(f"Output path is {output_path}")

    # Add newly defined variables to config
    config.update(
        {
            "nx": nx,
            "ny": ny,
            "random_seed": random_seed,
            "max_iterations": max_iterations,
            "write_output": write_output,
            "root_path": root_path,
            "output_path_name": output_path_name,
            "output_filebase": output_filebase,
            "output_path": output_path,
        }
    )
    return config
