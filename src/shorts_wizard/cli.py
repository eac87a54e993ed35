"""
CLI entry point for shorts-wizard
"""
import argparse
import sys
import traceback
from typing import List, Optional

from shorts_wizard.config.settings import AppConfig, SubtitleConfig, VideoConfig, load_env_file
from shorts_wizard.errors import ShortsWizardError
from shorts_wizard.pipeline.run import process_video
from shorts_wizard.utils.logger import error, info, set_level, success


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """generate / configure 共用的配置参数（与 AppConfig 字段一一对应）。"""
    video = parser.add_argument_group("video")
    video.add_argument("--input-path", required=True, help="Path to the input video file")
    video.add_argument("--output-path", required=True, help="Path to save the output video file")
    video.add_argument(
        "--short-duration-secs",
        type=int,
        default=60,
        help="Duration of the short video in seconds (default: 60)",
    )

    subs = parser.add_argument_group("subtitles")
    subs.add_argument(
        "--use-subtitles",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Enable or disable subtitle generation and burning (default: enabled)",
    )
    subs.add_argument(
        "--whisper-model-path",
        default="",
        help="Whisper model name (tiny.en, base, small, medium, large) or model path "
             "(default: $WHISPER_MODEL)",
    )
    subs.add_argument("--font-path", default="", help="Path to the font file for subtitles (.ttf, .otf)")
    subs.add_argument("--font-size", type=int, default=24, help="Font size for subtitles (default: 24)")
    subs.add_argument(
        "--font-color",
        default="white",
        help="Font color for subtitles, e.g. 'white' or '#FFFFFF' (default: white)",
    )
    subs.add_argument(
        "--subtitle-position-vertical-alignment",
        default="bottom",
        help="Vertical alignment for subtitles: top, center, bottom (default: bottom)",
    )
    subs.add_argument(
        "--subtitle-position-horizontal-alignment",
        default="center",
        help="Horizontal alignment for subtitles: left, center, right (default: center)",
    )


def config_from_args(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        video=VideoConfig(
            input_path=args.input_path,
            output_path=args.output_path,
            short_duration_secs=args.short_duration_secs,
        ),
        subtitles=SubtitleConfig(
            use_subtitles=args.use_subtitles,
            whisper_model_path=args.whisper_model_path,
            font_path=args.font_path,
            font_size=args.font_size,
            font_color=args.font_color,
            subtitle_position_vertical_alignment=args.subtitle_position_vertical_alignment,
            subtitle_position_horizontal_alignment=args.subtitle_position_horizontal_alignment,
        ),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shorts-wizard",
        description="Trim a video into a short and burn whisper-generated subtitles into it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  shorts-wizard generate --input-path in.mp4 --output-path out/short.mp4 \\
      --whisper-model-path base --font-path fonts/Inter.ttf
  shorts-wizard configure --output-config-path short.json --input-path in.mp4 \\
      --output-path out/short.mp4 --no-use-subtitles
  shorts-wizard run-from-file --config-path short.json
        """,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate a short directly with the given options",
    )
    _add_config_arguments(generate_parser)

    configure_parser = subparsers.add_parser(
        "configure",
        help="Save the given options to a JSON config file",
    )
    configure_parser.add_argument(
        "--output-config-path",
        required=True,
        help="Path to save the configuration JSON file",
    )
    _add_config_arguments(configure_parser)

    run_parser = subparsers.add_parser(
        "run-from-file",
        help="Generate a short using a JSON config file",
    )
    run_parser.add_argument("--config-path", required=True, help="Path to the configuration JSON file")

    return parser


def _run(config: AppConfig, verbose: bool) -> None:
    info(f"Starting video processing for: {config.video.output_path}")
    try:
        outputs = process_video(config)
    except (ShortsWizardError, OSError, ValueError) as e:
        error(f"Video processing failed: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(1)

    success("Video processing completed successfully")
    for key, path in outputs.items():
        info(f"{key}: {path}")


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        set_level("DEBUG")

    load_env_file()

    if args.command == "run-from-file":
        info(f"Loading configuration from {args.config_path}...")
        try:
            config = AppConfig.load_from_file(args.config_path)
        except (OSError, ValueError) as e:
            error(f"Failed to load configuration from '{args.config_path}': {e}")
            sys.exit(1)
        _run(config, args.verbose)
        return

    try:
        config = config_from_args(args)
    except ValueError as e:
        error(f"Invalid configuration: {e}")
        sys.exit(1)

    if args.command == "configure":
        info(f"Saving configuration to {args.output_config_path}...")
        try:
            config.save_to_file(args.output_config_path)
        except OSError as e:
            error(f"Failed to save configuration: {e}")
            sys.exit(1)
        success(f"Configuration saved to {args.output_config_path}")
        return

    _run(config, args.verbose)


if __name__ == "__main__":
    main()
