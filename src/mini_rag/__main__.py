import sys

from mini_rag.cli import main

sys.exit(main())
