__version__ = "1.0.0"
version_info = (1, 0, 0)
