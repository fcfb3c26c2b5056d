"""Status bar blocks reporting battery, CPU, GPU, disk, updates, Docker, GitHub, IP and windows."""

__version__ = "0.1.0"