"""NiceGUI status page."""
