import sys

from synapse_core.app import main

sys.exit(main())
