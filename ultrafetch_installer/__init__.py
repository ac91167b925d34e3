"""UltraFetch installer: fetches the UltraFetch script and prepares the host for it."""

__version__ = "3.1.0"
