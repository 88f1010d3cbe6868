# check_db.py

import sys

from marketplace.maintenance import main as maintenance_main


def main():
    return maintenance_main(["check-db"])


if __name__ == "__main__":
    sys.exit(main())
