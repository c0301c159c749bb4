"""Entry point for tasklists when run as a module.

This allows the package to be run with: python -m tasklists
"""

import sys

from tasklists.cli import main

if __name__ == "__main__":
    sys.exit(main())
