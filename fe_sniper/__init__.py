"""FE Sniper - NVIDIA Founders Edition stock watcher and auto-carter for proshop.fi."""

__version__ = "0.1.0"
