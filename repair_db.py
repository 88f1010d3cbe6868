# repair_db.py
#
#   python repair_db.py           -> dry run, prints planned deletions
#   python repair_db.py --apply   -> deletes orphaned records

import sys

from marketplace.maintenance import main as maintenance_main


def main():
    return maintenance_main(["repair", *sys.argv[1:]])


if __name__ == "__main__":
    sys.exit(main())
