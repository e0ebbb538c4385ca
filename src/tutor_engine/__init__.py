"""Modal-editor exercise workstation with parallel verification."""

__all__ = [
    "actions",
    "adapters",
    "buffer",
    "config",
    "errors",
    "exercises",
    "keymaps",
    "modes",
    "runtime",
    "workstation",
]

__version__ = "0.1.0"
