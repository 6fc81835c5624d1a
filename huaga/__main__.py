import sys

from huaga.main import run

sys.exit(run())
