# httpload/__main__.py
import sys

from httpload.cli import main

sys.exit(main())
