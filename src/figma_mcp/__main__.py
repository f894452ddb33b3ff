import sys

from figma_mcp.server import main

sys.exit(main())
