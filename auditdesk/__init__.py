"""List view-state engine for the network device and security audit views."""

__version__ = "0.1.0"
