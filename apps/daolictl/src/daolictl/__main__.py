"""daolictl executable module.

No error handling here: the console script entry point is cli.main(), so
both entry points go through the same code path.
"""

from __future__ import annotations

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
