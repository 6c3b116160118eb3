"""
Main entry point for the Google Scholar Profile Exporter
"""
import argparse
import asyncio
import sys
from pathlib import Path

from scraper import EXPORT_KINDS, MissingInputError, ScholarProfileScraper


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Export the publications table of a Google Scholar profile to CSV',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  python main.py x8xNLZQAAAAJ
  python main.py x8xNLZQAAAAJ --load-all --format csv popcites bibtex
  python main.py --html saved_profile.html --format popcites
        """
    )

    parser.add_argument(
        'user_input',
        type=str,
        nargs='?',
        default=None,
        help='Google Scholar user ID or profile URL'
    )

    parser.add_argument(
        '--html',
        type=str,
        default=None,
        help='Export from a saved profile page instead of opening a browser'
    )

    parser.add_argument(
        '--format',
        dest='formats',
        nargs='+',
        choices=EXPORT_KINDS,
        default=['csv'],
        help='Exports to produce (default: csv)'
    )

    parser.add_argument(
        '--load-all',
        action='store_true',
        help="Click 'Show more' until every publication is loaded"
    )

    parser.add_argument(
        '--max-clicks',
        type=int,
        default=200,
        help="Upper bound on 'Show more' clicks (default: 200)"
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default='.',
        help='Directory for the exported files (default: current directory)'
    )

    parser.add_argument(
        '--headful',
        action='store_true',
        help='Show the browser window (useful when Scholar asks for a CAPTCHA)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose debug logging (default: off)'
    )

    args = parser.parse_args(argv)
    if not args.html and not (args.user_input and args.user_input.strip()):
        parser.error("provide a Google Scholar user ID / profile URL, or --html FILE")
    return args


async def main(argv=None) -> int:
    """Main function to orchestrate the export"""
    args = parse_args(argv)
    output_dir = Path(args.output_dir)

    print("=" * 60)
    print("Google Scholar Profile Exporter")
    print("=" * 60)
    print(f"Source: {args.html or args.user_input}")
    print(f"Formats: {', '.join(args.formats)}")
    print(f"Load all: {'Yes' if args.load_all else 'No'}")
    print(f"Output Dir: {output_dir}")
    print("=" * 60)
    print()

    scraper = ScholarProfileScraper(
        headless=not args.headful,
        verbose=args.verbose,
        max_clicks=args.max_clicks,
    )

    try:
        if args.html:
            html = Path(args.html).read_text(encoding='utf-8')
            paths = scraper.export_snapshot(html, args.formats, output_dir)
        else:
            paths = await scraper.export_profile(
                args.user_input,
                args.formats,
                output_dir,
                load_all=args.load_all,
            )
    except MissingInputError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nExport interrupted by user.")
        return 1
    except Exception as e:
        print(f"\nError: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    print()
    for path in paths:
        print(f"✓ Saved: {path.absolute()}")
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
