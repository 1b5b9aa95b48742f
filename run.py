"""Development runner.
Usage: python run.py  (reads .env if present; TEMPLATE and API_KEY are required)
"""

from __future__ import annotations

from crudops.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
