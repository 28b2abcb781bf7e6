#!/usr/bin/env python3
"""Entry point for marko."""

from markoreader.app.main import run

if __name__ == "__main__":
    run()
