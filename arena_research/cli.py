#!/usr/bin/env python3
"""Command-line interface for arena-research.

Research Are.na from the terminal: search globally or within your own
network, browse channels, inspect blocks and users, and follow one-hop
connections.  Results print to stdout; status lines (cache hits, rate
limit usage, saved file paths) go to stderr so output can be piped.

Commands:
- search (s): search Are.na
- channel (ch): channel contents or connected channels
- block (b): a single block or the channels containing it
- user (u): a user profile and their channels
- me: authenticated user profile
- cache: clear or prune the response cache
- ping: check connectivity
- validate: validate configuration
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from arena_research.core.cache import DEFAULT_TTL, QUICK_TTL, ResponseCache
from arena_research.core.config import Config, get_config
from arena_research.core.errors import ArenaError
from arena_research.core.logging_setup import configure_logging
from arena_research.core.orchestrator import Orchestrator
from arena_research.search.options import EntityKind, SearchOptions, SearchScope, quick_lookup
from arena_research.search.sorting import CONTENTS_SORT_FLAGS, SEARCH_SORT_FLAGS, map_contents_sort, map_search_sort
from arena_research.utils.formatters import (
    MarkdownFormatter,
    OutputFormat,
    TerminalFormatter,
    draft_path,
    format_pagination,
    item_url,
    to_json,
)

logger = logging.getLogger(__name__)

COMMAND_ALIASES = {"s": "search", "ch": "channel", "b": "block", "u": "user"}

terminal = TerminalFormatter()
markdown = MarkdownFormatter()


def _status(message: str) -> None:
    print(message, file=sys.stderr)


def _add_output_flags(parser: argparse.ArgumentParser, save: bool = False) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--json", action="store_true", help="Raw JSON output")
    group.add_argument("--markdown", action="store_true", help="Markdown output")
    if save:
        parser.add_argument("--save", action="store_true", help="Save a markdown draft to the drafts directory")


def _add_paging_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--per", type=int, help="Results per page (max 100)")
    parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="arena-research",
        description="Are.na research CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  arena-research search "brutalist architecture" --type Channel --sort connections
  arena-research search typography --quick --save
  arena-research channel arena-influences --sort created --type Link
  arena-research block 3235876 --connections
  arena-research user charles-broskoski --markdown
  arena-research cache prune
        """,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: from configuration, WARNING)",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file (rotated)")
    parser.add_argument("--json-logs", action="store_true", help="Use JSON structured logging format")
    parser.add_argument("--config", help="Path to a YAML or TOML configuration file")
    parser.add_argument("--no-cache", action="store_true", help="Disable the response cache for this run")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Search
    search_parser = subparsers.add_parser("search", aliases=["s"], help="Search Are.na")
    search_parser.add_argument("query", nargs="+", help="Search terms")
    search_parser.add_argument("--type", type=EntityKind.parse, help="Filter by kind (Channel, Block, Link, ...)")
    search_parser.add_argument(
        "--sort", choices=sorted(SEARCH_SORT_FLAGS), default="score", help="Sort order (default: score)"
    )
    search_parser.add_argument(
        "--scope", type=SearchScope.parse, default=SearchScope.ALL, help="all, my or following (default: all)"
    )
    _add_paging_flags(search_parser)
    search_parser.add_argument("--quick", action="store_true", help="Channels only, top 10, 1h cache")
    _add_output_flags(search_parser, save=True)

    # Channel
    channel_parser = subparsers.add_parser("channel", aliases=["ch"], help="Browse a channel")
    channel_parser.add_argument("key", help="Channel slug or id")
    channel_parser.add_argument(
        "--sort", choices=sorted(CONTENTS_SORT_FLAGS), default="position", help="Contents order (default: position)"
    )
    channel_parser.add_argument("--type", type=EntityKind.parse, help="Filter contents by kind")
    channel_parser.add_argument("--connections", action="store_true", help="Show connected channels instead")
    _add_paging_flags(channel_parser)
    _add_output_flags(channel_parser, save=True)

    # Block
    block_parser = subparsers.add_parser("block", aliases=["b"], help="View a block")
    block_parser.add_argument("block_id", help="Block id")
    block_parser.add_argument("--connections", action="store_true", help="Show channels containing this block")
    _add_paging_flags(block_parser)
    _add_output_flags(block_parser)

    # User
    user_parser = subparsers.add_parser("user", aliases=["u"], help="View a user and their channels")
    user_parser.add_argument("key", help="User slug or id")
    _add_paging_flags(user_parser)
    _add_output_flags(user_parser)

    me_parser = subparsers.add_parser("me", help="Authenticated user profile")
    me_parser.add_argument("--json", action="store_true", help="Raw JSON output")

    cache_parser = subparsers.add_parser("cache", help="Manage the response cache")
    cache_parser.add_argument("cache_action", choices=["clear", "prune"], help="clear everything or prune expired")

    subparsers.add_parser("ping", help="Check API connectivity")

    validate_parser = subparsers.add_parser("validate", help="Validate configuration")
    validate_parser.add_argument("--strict", action="store_true", help="Exit with error if validation fails")

    args = parser.parse_args(argv)
    args.command = COMMAND_ALIASES.get(args.command, args.command)
    return args


def output_format(args: argparse.Namespace) -> OutputFormat:
    """Output format selected by the --json / --markdown flags."""
    if getattr(args, "json", False):
        return OutputFormat.JSON
    if getattr(args, "markdown", False):
        return OutputFormat.MARKDOWN
    return OutputFormat.TERMINAL


def report_rate_limit(orchestrator: Orchestrator) -> None:
    """Print the last rate limit snapshot, unless the answer came from cache."""
    status = orchestrator.last_rate_limit
    if status is None or orchestrator.last_from_cache:
        return
    _status(f"Rate limit: {status.limit} req/min | Tier: {status.tier}")


def save_draft(config: Config, name: str, content: str) -> Path:
    path = draft_path(config.get("output.drafts_dir", "~/clawd/drafts"), name)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    _status(f"\nSaved to {path}")
    return path


async def main_async(args: argparse.Namespace) -> int:
    """Main async entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    config = get_config(args.config)

    level_name = args.log_level or str(config.get("logging.level", "WARNING")).upper()
    log_file = args.log_file or (Path(config.get("logging.file")) if config.get("logging.file") else None)
    configure_logging(
        log_file=log_file,
        level=getattr(logging, level_name, logging.WARNING),
        use_json=args.json_logs,
        fmt=config.get("logging.format") or "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info(f"arena-research started with command: {args.command}")

    cache = ResponseCache(
        cache_dir=config.get("cache.directory", "data/cache"),
        default_ttl=config.get_int("cache.ttl_seconds", DEFAULT_TTL),
        enabled=config.get_bool("cache.enabled", True) and not args.no_cache,
    )

    if args.command == "cache":
        return handle_cache(args, cache)
    if args.command == "validate":
        return handle_validate(args, config)

    handlers = {
        "search": handle_search,
        "channel": handle_channel,
        "block": handle_block,
        "user": handle_user,
        "me": handle_me,
        "ping": handle_ping,
    }
    async with Orchestrator(config, cache=cache) as orchestrator:
        exit_code = await handlers[args.command](args, orchestrator)

    logger.info(f"arena-research completed command: {args.command}")
    return exit_code


async def handle_search(args: argparse.Namespace, orchestrator: Orchestrator) -> int:
    """Handle the search command."""
    fmt = output_format(args)
    config = orchestrator.config
    query = " ".join(args.query)
    options = SearchOptions(
        kind=args.type,
        sort=map_search_sort(args.sort),
        scope=args.scope,
        page=args.page,
        per_page=args.per or config.get_int("search.per_page", 24),
        cache_ttl=config.get_int("cache.ttl_seconds", DEFAULT_TTL),
    )
    if args.quick:
        options = replace(quick_lookup(options), cache_ttl=config.get_int("cache.quick_ttl_seconds", QUICK_TTL))

    page = await orchestrator.search(query, options)
    if orchestrator.last_from_cache:
        _status(f"(cached: {len(page)} results)")

    command = f'search "{query}"'
    if fmt is OutputFormat.JSON:
        print(to_json(page))
    elif fmt is OutputFormat.MARKDOWN:
        print(markdown.research_report(query, page.items, page.meta, command=command))
    else:
        print(terminal.entities(page.items, page.meta))

    if args.save:
        save_draft(config, query, markdown.research_report(query, page.items, page.meta, command=command))

    if not orchestrator.last_from_cache:
        sort_name = "connections" if args.quick else args.sort
        summary = format_pagination(page.meta) or f"page {page.meta.current_page}"
        _status(f"\n{len(page)} results | sorted by {sort_name} | {summary}")
    report_rate_limit(orchestrator)
    return 0


async def handle_channel(args: argparse.Namespace, orchestrator: Orchestrator) -> int:
    """Handle the channel command."""
    fmt = output_format(args)
    if args.connections:
        connections = await orchestrator.get_container_connections(args.key, page=args.page, per_page=args.per)
        if orchestrator.last_from_cache:
            _status(f"(cached: {len(connections)} connections)")
        title = f"Channels connected to {args.key}"
        if fmt is OutputFormat.JSON:
            print(to_json(connections))
        elif fmt is OutputFormat.MARKDOWN:
            print(markdown.connections(connections.items, connections.meta, title))
        else:
            print(terminal.connections(connections.items, connections.meta))
        if args.save:
            save_draft(orchestrator.config, f"{args.key}-connections", markdown.connections(
                connections.items, connections.meta, title
            ))
        report_rate_limit(orchestrator)
        return 0

    container = await orchestrator.get_container(args.key)
    contents = await orchestrator.get_container_contents(
        args.key,
        sort=map_contents_sort(args.sort),
        kind=args.type.value if args.type else None,
        page=args.page,
        per_page=args.per,
    )
    if orchestrator.last_from_cache:
        _status(f"(cached: {len(contents)} items)")

    if fmt is OutputFormat.JSON:
        print(to_json({"channel": container, "contents": list(contents.items), "meta": contents.meta}))
    elif fmt is OutputFormat.MARKDOWN:
        print(markdown.container_contents(container, contents.items, contents.meta))
    else:
        print(terminal.container(container))
        print()
        print(terminal.entities(contents.items, contents.meta))

    if args.save:
        save_draft(orchestrator.config, container.slug or str(args.key), markdown.container_contents(
            container, contents.items, contents.meta
        ))
    report_rate_limit(orchestrator)
    return 0


async def handle_block(args: argparse.Namespace, orchestrator: Orchestrator) -> int:
    """Handle the block command."""
    fmt = output_format(args)
    if args.connections:
        connections = await orchestrator.get_item_connections(args.block_id, page=args.page, per_page=args.per)
        if orchestrator.last_from_cache:
            _status(f"(cached: {len(connections)} connections)")
        if fmt is OutputFormat.JSON:
            print(to_json(connections))
        elif fmt is OutputFormat.MARKDOWN:
            print(markdown.connections(connections.items, connections.meta, f"Channels containing block {args.block_id}"))
        else:
            print(terminal.connections(connections.items, connections.meta, item_id=args.block_id))
        report_rate_limit(orchestrator)
        return 0

    item = await orchestrator.get_item(args.block_id)
    if orchestrator.last_from_cache:
        _status("(cached)")
    if fmt is OutputFormat.JSON:
        print(to_json(item))
    elif fmt is OutputFormat.MARKDOWN:
        print(markdown.item(item))
    else:
        print(terminal.item(item))
        print(f"\n  {item_url(item)}")
    report_rate_limit(orchestrator)
    return 0


async def handle_user(args: argparse.Namespace, orchestrator: Orchestrator) -> int:
    """Handle the user command."""
    fmt = output_format(args)
    actor = await orchestrator.get_actor(args.key)
    channels = await orchestrator.get_actor_contents(args.key, page=args.page, per_page=args.per)
    if orchestrator.last_from_cache:
        _status("(cached)")

    if fmt is OutputFormat.JSON:
        print(to_json({"user": actor, "channels": list(channels.items), "meta": channels.meta}))
    elif fmt is OutputFormat.MARKDOWN:
        print(markdown.actor_profile(actor, channels.items, channels.meta))
    else:
        print(terminal.actor(actor))
        print()
        if len(channels):
            print("Channels:\n")
            print(terminal.entities(channels.items, channels.meta))
    report_rate_limit(orchestrator)
    return 0


async def handle_me(args: argparse.Namespace, orchestrator: Orchestrator) -> int:
    """Handle the me command."""
    fmt = output_format(args)
    actor = await orchestrator.get_me()
    print(to_json(actor) if fmt is OutputFormat.JSON else terminal.actor(actor))
    report_rate_limit(orchestrator)
    return 0


async def handle_ping(args: argparse.Namespace, orchestrator: Orchestrator) -> int:
    """Handle the ping command."""
    await orchestrator.ping()
    print("Are.na API is reachable.")
    report_rate_limit(orchestrator)
    return 0


def handle_cache(args: argparse.Namespace, cache: ResponseCache) -> int:
    """Handle the cache command."""
    if args.cache_action == "clear":
        removed = cache.clear()
        print(f"Cleared {removed} cached entries.")
    else:
        removed = cache.prune()
        print(f"Pruned {removed} expired entries.")
    return 0


def handle_validate(args: argparse.Namespace, config: Config) -> int:
    """Handle the validate command."""
    result = config.validate()
    print(result)
    if args.strict and not result.is_valid:
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        exit_code = asyncio.run(main_async(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nAborted by user", file=sys.stderr)
        sys.exit(130)
    except ArenaError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
