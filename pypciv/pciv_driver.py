import logging
from functools import partial
from pypciv.expand_anvil import expand_anvil_step
from pypciv.classify_insitu import classify_insitu
from pypciv.synthetic_curtain import generate_synthetic_curtain

# Driver status
IDLE = "idle"
RUNNING = "running"
CONVERGED = "converged"


class PcivDriver(object):
    """ Iteration loop of the Physically Constrained Iterative Vision (PCIV) classification.

    The driver holds the current curtain snapshot and advances it one anvil expansion per step.
    When an expansion no longer changes the curtain, the remaining cold ice is classified as
    in-situ cirrus once and the driver converges. Pacing of the steps is left to the caller.
    """

    def __init__(self, initializer, nx=None, ny=None):
        """
        Parameters:
        -----------
        initializer: callable
            Called without arguments to get a new initial CurtainGrid.
        nx, ny: int, optional
            Expected curtain dimensions. Curtains of another size are rejected.
        """
        self.logger = logging.getLogger(__name__)
        self.initializer = initializer
        self.nx = nx
        self.ny = ny
        self.history = []
        self._load_initial_grid()

    def _load_initial_grid(self):
        grid = self.initializer()
        grid.check_initial(nx=self.nx, ny=self.ny)
        self._grid = grid
        self._iteration = 0
        self._status = IDLE
        self.history = []

    @property
    def grid(self):
        return self._grid

    @property
    def iteration(self):
        return self._iteration

    @property
    def status(self):
        return self._status

    @property
    def statistics(self):
        return self._grid.statistics()

    def start(self):
        """ Start or resume the expansion. Returns True if the driver is running afterwards. """
        if self._status == CONVERGED:
            self.logger.warning("Classification already converged, reset to run again")
            return False
        if self._status == IDLE:
            self.logger.info(f"Starting anvil expansion at iteration {self._iteration}")
            self._status = RUNNING
        return True

    def pause(self):
        """ Stop stepping, keeping the current snapshot and iteration count. """
        if self._status == RUNNING:
            self.logger.info(f"Paused at iteration {self._iteration}")
            self._status = IDLE

    def reset(self):
        """ Discard the current curtain and start over from a new initial curtain. """
        self._load_initial_grid()
        self.logger.info("Reset with a new initial curtain")

    def _record(self, phase, changed):
        record = {"iteration": self._iteration, "phase": phase, "changed": changed}
        record.update(self.statistics)
        self.history.append(record)

    def step(self):
        """
        Run one anvil expansion iteration, and the in-situ classification if it stalled.

        Returns:
            changed: bool
                True if the expansion changed the curtain. False when the classification
                converged in this step or the driver is not running.
        """
        if self._status != RUNNING:
            self.logger.warning(f"Step requested while {self._status}, ignored")
            return False

        self._iteration += 1
        self._grid, changed = expand_anvil_step(self._grid)
        self._record("expand", changed)
        self.logger.debug(f"Iteration {self._iteration}: {self.statistics}")
        if changed:
            return True

        # Anvil stopped growing, classify what is left once
        self._grid, progressed = classify_insitu(self._grid)
        self._record("finalize", progressed)
        self._status = CONVERGED
        self.logger.info(f"Converged after {self._iteration} iterations: {self.statistics}")
        return False

    def run(self, max_iterations=None):
        """
        Step until convergence.

        Args:
            max_iterations: int, optional
                Maximum number of iterations in this run, default is the curtain size.
                If reached before convergence the driver pauses.

        Returns:
            statistics: dictionary
                Number of pixels of each cloud type.
        """
        if max_iterations is None:
            max_iterations = self._grid.nx * self._grid.ny
        if not self.start():
            return self.statistics
        for _ in range(max_iterations):
            self.step()
            if self._status == CONVERGED:
                break
        else:
            self.logger.warning(f"No convergence after {max_iterations} iterations, pausing")
            self.pause()
        return self.statistics

    def __repr__(self):
        return f"PcivDriver(status={self._status}, iteration={self._iteration}, grid={self._grid!r})"


def run_pciv_classification(config):
    """
    Classify a synthetic curtain into anvil and in-situ cirrus.

    Args:
        config: dictionary
            Dictionary containing config parameters.

    Returns:
        outfile: string
            Output netCDF file name, None if output is disabled.
    """
    logger = logging.getLogger(__name__)
    logger.info("Running PCIV cirrus classification")

    nx = config["nx"]
    ny = config["ny"]
    max_iterations = config.get("max_iterations", nx * ny)
    write_output = config.get("write_output", 1)

    driver = PcivDriver(partial(generate_synthetic_curtain, config), nx=nx, ny=ny)
    logger.info(f"Initial curtain: {driver.statistics}")
    statistics = driver.run(max_iterations=max_iterations)
    for name, npix in statistics.items():
        logger.info(f"{name}: {npix} px")

    outfile = None
    if write_output:
        from pypciv.netcdf_io import write_pciv_classification
        outfile = (
            config["output_path"] +
            config["output_filebase"] +
            f"{nx}x{ny}.nc"
        )
        write_pciv_classification(outfile, driver.grid, driver.iteration, config, status=driver.status)
    return outfile
