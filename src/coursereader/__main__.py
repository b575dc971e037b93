"""Allow running as `python -m coursereader`."""

from coursereader.interface.cli import app

if __name__ == "__main__":
    app(prog_name="coursereader")
