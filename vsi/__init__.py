"""VS Code Server installer for hosts that need the patched CentOS 7 builds."""

__version__ = "0.1.0"
