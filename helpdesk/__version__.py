"""Release metadata reported by ``GET /api/version``."""

__version__ = "0.3.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Stamped by the release pipeline; ``None`` in development checkouts.
__build_date__ = None
__commit_sha__ = None
