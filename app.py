#!/usr/bin/env python
"""
Artist Collaboration Network - Streamlit entrypoint.
Version: 1.0.0
"""

from artvis.ui import render_app


def main() -> None:
    render_app()


if __name__ == "__main__":
    main()
