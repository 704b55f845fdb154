"""Allow ``python -m aggfetch``."""

from aggfetch.cli.main import app

if __name__ == "__main__":
    app()
