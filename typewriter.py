import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from helpdesk.markup import TerminalMount, parse, render_markdown, reveal
from helpdesk.markup.reveal import DEFAULT_CHAR_DELAY_MS

logger = logging.getLogger(__name__)


def _echo(message: str) -> None:
    sys.stdout.write(f"{message}\n")


def _read_source(path: str | None) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


async def animate(text: str, delay_ms: float, *, batch: bool = False) -> bool:
    """Type ``text`` into the terminal; returns False if interrupted."""
    mount = TerminalMount(sys.stdout)
    try:
        return await reveal(mount, parse(text), delay_ms, batch=batch)
    finally:
        mount.close()
        sys.stdout.write("\n")


def main(argv=None):
    load_dotenv()
    parser = argparse.ArgumentParser(
        description="Render assistant markdown as HTML or type it out in the terminal"
    )
    parser.add_argument("path", nargs="?", help="Markdown file (default: stdin)")
    parser.add_argument(
        "--html", action="store_true", help="Print the rendered HTML and exit"
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_CHAR_DELAY_MS,
        help="Milliseconds between characters",
    )
    parser.add_argument(
        "--batch",
        action="store_true",
        help="Write 30-44 characters per tick instead of one",
    )
    args = parser.parse_args(argv)

    try:
        text = _read_source(args.path)
    except OSError as exc:
        parser.error(f"cannot read {args.path}: {exc}")

    if args.html:
        _echo(render_markdown(text))
        return 0

    try:
        asyncio.run(animate(text, args.delay, batch=args.batch))
    except KeyboardInterrupt:
        logger.info("Reveal interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
