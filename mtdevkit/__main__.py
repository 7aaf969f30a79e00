import sys

from mtdevkit.cli import main

sys.exit(main())
