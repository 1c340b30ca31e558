import sys

from .deploy_all import main

sys.exit(main())
