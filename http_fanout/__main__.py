import sys

from http_fanout.cli import main

sys.exit(main())
