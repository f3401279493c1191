"""lottoscan — scanned-code classification and lottery ticket verification."""

__version__ = "0.1.0"
