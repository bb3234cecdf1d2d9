"""assetinfo — identify installed software and report end-of-life status."""

__version__ = "0.3.0"
