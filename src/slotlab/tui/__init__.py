"""Optional Textual viewer (install the ``ui`` extra)."""
