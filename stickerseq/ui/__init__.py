"""PySide6 widgets for the main window."""
