import sys

from adisyon.commands import main


if __name__ == "__main__":
    sys.exit(main())
