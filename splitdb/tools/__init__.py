"""Command line tools for splitdb."""
