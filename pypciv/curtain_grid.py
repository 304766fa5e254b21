from collections import namedtuple
import numpy as np
from pypciv.cloudtypes import CLOUDTYPE_NAMES, INITIAL_CLOUDTYPES
from pypciv.pcfunctions import get_neighbors, count_cloudtypes

# Read-only view of a single curtain pixel
Cell = namedtuple("Cell", ["x", "y", "cloudtype", "temperature", "iwc", "just_changed"])


class OutOfBoundsError(IndexError):
    """Raised when a pixel position falls outside the curtain."""


class InvalidGridError(ValueError):
    """Raised when curtain arrays violate the grid invariants."""


def _read_only(array):
    array.flags.writeable = False
    return array


class CurtainGrid(object):
    """ A fixed-size 2-D curtain of pixels, stored as [y, x] arrays.

    Temperature and ice water content are static once the grid is built. Each classification
    step produces a new CurtainGrid that shares them and carries its own cloudtype and
    just_changed arrays, so a grid instance is never modified after construction.
    """

    def __init__(self, cloudtype, temperature, iwc, just_changed=None):
        """
        Args:
            cloudtype: np.ndarray(int)
                Cloud type code of each pixel, see pypciv.cloudtypes.
            temperature: np.ndarray(float)
                Temperature of each pixel [degC].
            iwc: np.ndarray(float)
                Ice water content of each pixel [mg m-3], must be >= 0.
            just_changed: np.ndarray(bool), optional
                Flag of pixels whose cloud type changed in the step that produced this grid.
        """
        cloudtype = np.asarray(cloudtype)
        if cloudtype.ndim != 2:
            raise InvalidGridError(f"cloudtype must be 2-D, got shape {cloudtype.shape}")
        if cloudtype.size == 0:
            raise InvalidGridError("Curtain must contain at least one pixel")
        if not np.issubdtype(cloudtype.dtype, np.integer):
            raise InvalidGridError(f"cloudtype must be integer codes, got {cloudtype.dtype}")
        if temperature is None or iwc is None:
            raise InvalidGridError("temperature and iwc are required")
        if np.shape(temperature) != cloudtype.shape:
            raise InvalidGridError(
                f"temperature shape {np.shape(temperature)} does not match cloudtype {cloudtype.shape}"
            )
        if np.shape(iwc) != cloudtype.shape:
            raise InvalidGridError(
                f"iwc shape {np.shape(iwc)} does not match cloudtype {cloudtype.shape}"
            )
        unknown = np.setdiff1d(np.unique(cloudtype), list(CLOUDTYPE_NAMES))
        if len(unknown) > 0:
            raise InvalidGridError(f"Unknown cloudtype codes: {unknown.tolist()}")

        temperature = np.array(temperature, dtype=float)
        if not np.all(np.isfinite(temperature)):
            raise InvalidGridError("temperature contains non-finite values")
        iwc = np.array(iwc, dtype=float)
        if not np.all(np.isfinite(iwc)):
            raise InvalidGridError("iwc contains non-finite values")
        if np.any(iwc < 0):
            raise InvalidGridError("iwc must be >= 0")
        self._temperature = _read_only(temperature)
        self._iwc = _read_only(iwc)

        self._cloudtype = _read_only(np.array(cloudtype, dtype=np.int8))
        if just_changed is None:
            just_changed = np.zeros(cloudtype.shape, dtype=bool)
        elif np.shape(just_changed) != cloudtype.shape:
            raise InvalidGridError(
                f"just_changed shape {np.shape(just_changed)} does not match cloudtype {cloudtype.shape}"
            )
        self._just_changed = _read_only(np.array(just_changed, dtype=bool))

    @classmethod
    def from_initial(cls, cloudtype, temperature, iwc):
        """
        Build a curtain as supplied by an initializer.

        Only clear, convective core and unclassified ice pixels are accepted.
        """
        grid = cls(cloudtype, temperature, iwc)
        grid.check_initial()
        return grid

    def check_initial(self, nx=None, ny=None):
        """
        Verify the grid is a valid starting snapshot.

        Args:
            nx: int, optional
                Expected number of pixels in the x direction.
            ny: int, optional
                Expected number of pixels in the y direction.
        """
        if (nx is not None and nx != self.nx) or (ny is not None and ny != self.ny):
            raise InvalidGridError(
                f"Expected a {nx} x {ny} curtain, got {self.nx} x {self.ny}"
            )
        classified = ~np.isin(self._cloudtype, INITIAL_CLOUDTYPES)
        if np.any(classified):
            ys, xs = np.nonzero(classified)
            raise InvalidGridError(
                f"Initial curtain already has {len(ys)} classified pixels, first at (x={xs[0]}, y={ys[0]})"
            )

    @property
    def shape(self):
        return self._cloudtype.shape

    @property
    def nx(self):
        return self._cloudtype.shape[1]

    @property
    def ny(self):
        return self._cloudtype.shape[0]

    @property
    def cloudtype(self):
        return self._cloudtype

    @property
    def temperature(self):
        return self._temperature

    @property
    def iwc(self):
        return self._iwc

    @property
    def just_changed(self):
        return self._just_changed

    def in_bounds(self, x, y):
        return 0 <= x < self.nx and 0 <= y < self.ny

    def _check_bounds(self, x, y):
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(
                f"Position (x={x}, y={y}) outside curtain of size {self.nx} x {self.ny}"
            )

    def get(self, x, y):
        self._check_bounds(x, y)
        return Cell(
            x=x,
            y=y,
            cloudtype=int(self._cloudtype[y, x]),
            temperature=float(self._temperature[y, x]),
            iwc=float(self._iwc[y, x]),
            just_changed=bool(self._just_changed[y, x]),
        )

    def neighbors(self, x, y):
        """4-connected in-bounds neighbors of (x, y), ordered down, up, right, left."""
        self._check_bounds(x, y)
        return get_neighbors((x, y), self.nx, self.ny)

    def changed_positions(self):
        """List of (x, y) positions flagged in just_changed."""
        ys, xs = np.nonzero(self._just_changed)
        return [(int(x), int(y)) for y, x in zip(ys, xs)]

    def advance(self, cloudtype, just_changed):
        """Return the next snapshot, sharing this grid's temperature and iwc."""
        cloudtype = np.asarray(cloudtype)
        if cloudtype.shape != self.shape or np.shape(just_changed) != self.shape:
            raise InvalidGridError(f"Snapshot shape must stay {self.shape}")
        grid = object.__new__(CurtainGrid)
        grid._temperature = self._temperature
        grid._iwc = self._iwc
        grid._cloudtype = _read_only(np.array(cloudtype, dtype=np.int8))
        grid._just_changed = _read_only(np.array(just_changed, dtype=bool))
        return grid

    def statistics(self):
        return count_cloudtypes(self._cloudtype)

    def __repr__(self):
        counts = ", ".join(f"{name}={npix}" for name, npix in self.statistics().items())
        return f"CurtainGrid(nx={self.nx}, ny={self.ny}, {counts})"
