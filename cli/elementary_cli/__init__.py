"""Elementary CLI: render view specs to HTML from the command line."""

__version__ = "0.1.0"
