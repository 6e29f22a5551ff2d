import sys

from mmprom.cli import main

sys.exit(main())
