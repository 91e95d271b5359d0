"""Main function for watchdrift."""

from watchdrift.core import cli


def run_main() -> None:
    """Main entry point to watchdrift."""
    cli.app()


if __name__ == "__main__":
    cli.app()
