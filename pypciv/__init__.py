from pypciv._version import __version__
