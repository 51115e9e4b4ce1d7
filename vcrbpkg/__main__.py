#!/usr/bin/env python3
"""
Entry point for running vcrbpkg as a module.
"""

import sys

from vcrbpkg import main

if __name__ == '__main__':
    sys.exit(main())
