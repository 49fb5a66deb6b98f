"""Top-level package for py_ledgersync.

Groups the ledger consistency core (validation, aggregation, counter-account
advice) and the cross-module synchronization engine under
`py_ledgersync.*` so the library can be imported as a dependency.
"""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = [
    "__version__",
]
