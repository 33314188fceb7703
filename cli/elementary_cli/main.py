"""Main entry point for Elementary CLI."""
from __future__ import annotations

import dataclasses
import logging
import sys

from elementary.kernel.app import App
from elementary.kernel.config import settings
from elementary.kernel.driver import make_renderer
from elementary_cli import __version__
from elementary_cli.loader import ViewsFileError, load_model, load_views

DEFAULT_VIEW = "main"

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def print_help():
    """Print help message."""
    print(f"""
Elementary CLI v{__version__}

Usage:
  elementary render VIEWS.json [options]

Commands:
  render            Compile a view and print the rendered HTML

Options:
  --model FILE      JSON object used as the render model
  --view NAME       View to render (default: {DEFAULT_VIEW})
  --telemetry       Log compile and render timings
  --debug           Log the compiled fragment tree
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  ELEMENTARY_DEBUG                  Same as --debug
  ELEMENTARY_TELEMETRY              Same as --telemetry
  ELEMENTARY_MAPBOX_ACCESS_TOKEN    Access token passed to map widgets
  ELEMENTARY_MAP_HEIGHT             Map placeholder height (default: 300px)

Examples:
  elementary render views.json                         # Render "main"
  elementary render views.json --model todo.json       # With data
  elementary render views.json --view row --debug      # Another view
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (render)
        views_path: str | None
        model_path: str | None
        view_name: str
        telemetry: bool
        debug: bool
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "views_path": None,
        "model_path": None,
        "view_name": DEFAULT_VIEW,
        "telemetry": False,
        "debug": False,
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg == "render" and result["command"] is None:
            result["command"] = "render"
        elif arg == "--model":
            if i + 1 < len(args):
                result["model_path"] = args[i + 1]
                i += 1
            else:
                print("Error: --model requires a file")
                sys.exit(1)
        elif arg == "--view":
            if i + 1 < len(args):
                result["view_name"] = args[i + 1]
                i += 1
            else:
                print("Error: --view requires a name")
                sys.exit(1)
        elif arg == "--telemetry":
            result["telemetry"] = True
        elif arg == "--debug":
            result["debug"] = True
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'elementary --help' for usage.")
            sys.exit(1)
        elif result["command"] == "render" and result["views_path"] is None:
            result["views_path"] = arg
        else:
            print(f"Unknown command: {arg}")
            print("Run 'elementary --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def configure_logging(debug: bool, telemetry: bool):
    """Send kernel logs to stderr; stdout carries only the HTML."""
    level = logging.DEBUG if debug else logging.INFO if telemetry else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def render(args: dict) -> int:
    """Run the render command. Returns the process exit code."""
    try:
        views = load_views(args["views_path"])
        model = load_model(args["model_path"])
    except ViewsFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    view = views.get(args["view_name"])
    if view is None:
        print(f"Error: no view named {args['view_name']!r}", file=sys.stderr)
        print(f"Available: {', '.join(sorted(views)) or '(none)'}", file=sys.stderr)
        return 1

    options = dataclasses.replace(
        settings.render_options(),
        debug=settings.DEBUG or args["debug"],
        telemetry=settings.TELEMETRY or args["telemetry"],
    )
    configure_logging(options.debug, options.telemetry)

    app = App()
    result = make_renderer(args["view_name"], options, app)(views, view, model)
    if result.err:
        print(f"Error: {result.err.reason}: {result.err.message or result.err.spec!r}", file=sys.stderr)
        return 1

    print(app.root.html)
    return 0


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    # Handle help and version first
    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"elementary-cli {__version__}")
        return

    if args["command"] == "render":
        if args["views_path"] is None:
            print("Error: render requires a views file")
            print("Run 'elementary --help' for usage.")
            sys.exit(1)
        sys.exit(render(args))

    print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
