"""
panoconv - Command Line Entry Point
Converts an equirectangular panorama to a cubemap or back.

    panoconv INPUT OUTPUT [--from latlong|cubemap] [--to latlong|cubemap]
                          [--layout strip|separate-faces] [--workers N] ...
"""

import sys
import argparse
import logging
from pathlib import Path

from .config.defaults import (
    PROJECTION_KINDS, CUBEMAP_LAYOUTS, LOG_FORMAT,
    APP_NAME, APP_VERSION, APP_DESCRIPTION,
    EXIT_SUCCESS, EXIT_USAGE_ERROR
)
from .config.config_manager import ConfigManager
from .errors import ConversionError, UsageError
from .pipeline import ImageConverter, ConversionOptions

logger = logging.getLogger(__name__)


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser that raises UsageError instead of exiting"""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog=APP_NAME, description=APP_DESCRIPTION)
    parser.add_argument("input", help="Input image (for separate faces: base name, e.g. in.png -> in_px.png ...)")
    parser.add_argument("output", help="Output image (for separate faces: base name, e.g. out.png -> out_px.png ...)")
    parser.add_argument("--from", dest="source_projection", choices=sorted(PROJECTION_KINDS),
                        help="Source projection (default: latlong)")
    parser.add_argument("--to", dest="target_projection", choices=sorted(PROJECTION_KINDS),
                        help="Target projection (default: cubemap)")
    parser.add_argument("--layout", choices=sorted(CUBEMAP_LAYOUTS),
                        help="Cubemap layout (default: strip)")
    parser.add_argument("--workers", type=int, help="Rendering threads (default: 1)")
    parser.add_argument("--no-face-sharing", dest="share_faces", action="store_false", default=None,
                        help="Render strip cubemaps with the generic per-pixel loop")
    parser.add_argument("--no-atomic-write", dest="atomic_write", action="store_false", default=None,
                        help="Write the output in place instead of via a temporary file")
    parser.add_argument("--config", type=Path, help="Load options from a saved JSON preset")
    parser.add_argument("--save-config", type=Path, help="Save the effective options as a JSON preset")
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def setup_logging(verbose: bool = False, log_file: Path = None):
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        try:
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            raise UsageError(f"Cannot open log file {log_file}: {e}") from e
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers
    )


def resolve_options(args, config_manager: ConfigManager = None) -> ConversionOptions:
    """
    Merge defaults, an optional preset file and explicit flags (in that order).

    Raises:
        UsageError: unreadable preset or invalid option values
    """
    config_manager = config_manager or ConfigManager()
    config = config_manager.get_default_config()

    if args.config is not None:
        loaded = config_manager.load_config(args.config)
        if loaded is None:
            raise UsageError(f"Could not load configuration: {args.config}")
        if not isinstance(loaded, dict):
            raise UsageError(f"Configuration must be a JSON object: {args.config}")
        config.update(loaded)

    for key in ('source_projection', 'target_projection', 'layout', 'workers',
                'share_faces', 'atomic_write'):
        value = getattr(args, key)
        if value is not None:
            config[key] = value

    is_valid, errors = config_manager.validate_config(config)
    if not is_valid:
        raise UsageError("; ".join(errors))

    options = ConversionOptions.from_dict(config)

    if args.save_config is not None:
        if not config_manager.save_config(options.to_dict(), filepath=args.save_config):
            raise UsageError(f"Could not save configuration: {args.save_config}")

    return options


def main(argv=None) -> int:
    """Main command line entry point; returns the process exit code"""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"{APP_NAME}: error: {e}", file=sys.stderr)
        return e.exit_code

    try:
        setup_logging(args.verbose, args.log_file)
        options = resolve_options(args)
        logger.debug(f"Options: {options.to_dict()}")
        converter = ImageConverter(options)
        converter.convert(args.input, args.output)

    except ConversionError as e:
        logger.error(str(e))
        return e.exit_code

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug("Traceback:", exc_info=True)
        return EXIT_USAGE_ERROR

    return EXIT_SUCCESS


if __name__ == '__main__':
    sys.exit(main())
