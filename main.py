# -*- coding: utf-8 -*-
"""CI entry point: regenerate the bitbake dependency manifest and publish it."""
from __future__ import annotations

import sys

from recipe_sync.cli import main

if __name__ == "__main__":
    sys.exit(main())
