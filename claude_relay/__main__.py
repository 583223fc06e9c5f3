import sys

from claude_relay.launcher import main

sys.exit(main())
