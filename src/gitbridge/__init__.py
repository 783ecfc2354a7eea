"""gitbridge: sync a sandboxed project with GitHub and GitLab.

Layers, leaves first:

- :mod:`gitbridge.utils.paths` - POSIX path helpers
- :mod:`gitbridge.fs` - engine-facing filesystem adapter and sandbox stores
- :mod:`gitbridge.status` - status matrix classification
- :mod:`gitbridge.vault` - encrypted per-domain credentials
- :mod:`gitbridge.providers` - GitHub/GitLab bindings and push orchestration
- :mod:`gitbridge.sync` - clone/fetch/commit/push through the engine
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
