"""Allow ``python -m carpet_plot``."""

from carpet_plot.cli import app

if __name__ == "__main__":
    app()
