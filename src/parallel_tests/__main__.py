"""Allow running parallel-tests with ``python -m parallel_tests``."""

from __future__ import annotations

import sys

from parallel_tests.cli import main


if __name__ == '__main__':
    sys.exit(main())
