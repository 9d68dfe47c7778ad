"""Live and per-turn feedback for spoken/typed practice conversations."""

__version__ = "0.1.0"
