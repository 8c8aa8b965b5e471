from tariffcalc.cli.app import main_menu
from tariffcalc.db import initialize_db
from tariffcalc.logging import configure_logging


def main() -> None:
    configure_logging()
    initialize_db()
    main_menu()


if __name__ == "__main__":
    main()
