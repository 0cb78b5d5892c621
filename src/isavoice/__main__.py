"""Entry point for running isavoice as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the isavoice CLI application."""
    app()


if __name__ == "__main__":
    main()
