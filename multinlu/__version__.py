"""Version information for multinlu"""

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)
VERSION = __version__
