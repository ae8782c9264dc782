import sys

from Tree_Hash.cli.hash_tree import main


if __name__ == "__main__":
    sys.exit(main())
