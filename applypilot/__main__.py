import sys

from applypilot.cli import main

sys.exit(main())
