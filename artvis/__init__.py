"""Artist collaboration network: weighted graph filtering and visualization."""
