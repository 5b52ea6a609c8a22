# File: src/parkledger/__main__.py
"""Allow ``python -m parkledger``"""

import sys

from .main import main

sys.exit(main())
