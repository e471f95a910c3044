"""Version information for VirtCam."""

APP_VERSION = "0.1.0"

__all__ = ["APP_VERSION"]
