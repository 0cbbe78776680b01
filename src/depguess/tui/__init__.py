"""Interactive terminal UI built on textual."""
