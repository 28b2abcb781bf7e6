"""Command line entry point, configuration and the browser reader server."""
