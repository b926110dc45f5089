import sys
import json
import logging
import argparse
from datetime import datetime
from pathlib import Path

from colorama import Fore, Style, init

from blog_posts.config.settings import load_settings
from blog_posts.post_watcher import watch
from blog_posts.services.collection import PostCollection
from blog_posts.services.linter import PostLinter
from blog_posts.services.publisher import PostPublisher
from blog_posts.utils.file_formats import write_to_json

init(autoreset=True)

logger = logging.getLogger(__name__)


CONSOLE_HANDLER = "blog-posts-console"


def configure_logging(log_file=None, verbose=False):
    level = logging.DEBUG if verbose else logging.INFO
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=level,
            format="%(asctime)s [%(levelname)s] %(message)s",
        )
    root = logging.getLogger()
    root.setLevel(level)

    if any(handler.get_name() == CONSOLE_HANDLER for handler in root.handlers):
        return
    console = logging.StreamHandler()
    console.set_name(CONSOLE_HANDLER)
    console.setLevel(level if verbose else logging.WARNING)
    formatter = logging.Formatter("[%(levelname)s] %(message)s")
    console.setFormatter(formatter)
    root.addHandler(console)


def build_linter(settings, check_round_trip=True) -> PostLinter:
    return PostLinter(
        required_fields=settings["required_fields"],
        excerpt_separator=settings["excerpt_separator"],
        extensions=settings["extensions"],
        check_round_trip=check_round_trip,
    )


def cmd_lint(args, settings) -> int:
    linter = build_linter(settings, check_round_trip=not args.no_round_trip)
    report = linter.lint_paths(args.paths or [settings["posts_dir"]])

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return 0 if report.ok else 1

    for issue in report.issues:
        color = Fore.RED if issue.severity == "error" else Fore.YELLOW
        print(color + f"✗ {issue}")

    summary = (
        f"{report.files_checked} files checked, "
        f"{len(report.errors)} errors, {len(report.warnings)} warnings"
    )
    print((Fore.GREEN + "✓ " if report.ok else Fore.RED + "✗ ") + summary)
    return 0 if report.ok else 1


def cmd_list(args, settings) -> int:
    collection = PostCollection.from_directory(settings["posts_dir"], settings["extensions"])
    posts = collection.ordered()
    if args.category:
        posts = [p for p in posts if args.category in p.categories]
    if args.tag:
        posts = [p for p in posts if args.tag in p.tags]

    for post in posts:
        published = post.published
        stamp = published.strftime("%Y-%m-%d") if published else "----------"
        print(f"{Fore.CYAN}{stamp}{Style.RESET_ALL}  {post.slug}  {post.title or ''}")
    return 0


def cmd_new(args, settings) -> int:
    publisher = PostPublisher(
        settings["posts_dir"],
        default_layout=settings["default_layout"],
        extension=settings["default_extension"],
        excerpt_separator=settings["excerpt_separator"],
    )
    date = datetime.strptime(args.date, "%Y-%m-%d %H:%M") if args.date else None
    path = publisher.new_post(
        args.title,
        date=date,
        categories=args.category,
        tags=args.tag,
        comments=not args.no_comments,
        layout=args.layout,
        with_excerpt=args.excerpt,
    )
    print(Fore.GREEN + f"✓ Created {path}")
    return 0


def cmd_index(args, settings) -> int:
    collection = PostCollection.from_directory(settings["posts_dir"], settings["extensions"])
    collection.ensure_unique()
    output = Path(args.output)
    path = write_to_json(collection.index(settings["permalink"]), output.parent, output.name)
    print(Fore.GREEN + f"✓ Indexed {len(collection)} posts -> {path}")
    return 0


def cmd_watch(args, settings) -> int:
    watch(settings["posts_dir"], build_linter(settings), settings["extensions"])
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blog-posts", description="Check and scaffold blog posts")
    parser.add_argument("--config", help="Path to a JSON5 config file (default: blog.json5 if present)")
    parser.add_argument("--posts-dir", help="Folder holding the posts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to the console")
    sub = parser.add_subparsers(dest="command", required=True)

    lint = sub.add_parser("lint", help="Run content-integrity checks")
    lint.add_argument("paths", nargs="*", help="Files or folders (default: the posts folder)")
    lint.add_argument("--json", action="store_true", help="Print the report as JSON")
    lint.add_argument("--no-round-trip", action="store_true", help="Skip the re-serialization check")
    lint.set_defaults(func=cmd_lint)

    listing = sub.add_parser("list", help="List posts, newest first")
    listing.add_argument("--category")
    listing.add_argument("--tag")
    listing.set_defaults(func=cmd_list)

    new = sub.add_parser("new", help="Create a new dated post")
    new.add_argument("title")
    new.add_argument("--date", help='Publication time as "YYYY-MM-DD HH:MM" (default: now)')
    new.add_argument("--category", action="append")
    new.add_argument("--tag", action="append")
    new.add_argument("--layout")
    new.add_argument("--no-comments", action="store_true")
    new.add_argument("--excerpt", action="store_true", help="Insert a truncation marker")
    new.set_defaults(func=cmd_new)

    index = sub.add_parser("index", help="Write a JSON index of the posts")
    index.add_argument("--output", default="posts.json")
    index.set_defaults(func=cmd_index)

    watch_cmd = sub.add_parser("watch", help="Lint posts as they are saved")
    watch_cmd.set_defaults(func=cmd_watch)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config, posts_dir=args.posts_dir)
        configure_logging(settings["log_file"], args.verbose)
        return args.func(args, settings)
    except (ValueError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(Fore.RED + f"✗ {type(e).__name__}: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
