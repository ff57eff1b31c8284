import sys

from lockdown_sim.cli import main

sys.exit(main())
