"""
CLI for Aer.

Minimal CLI using stdlib for fast startup on the capture path.
Subcommands are imported lazily to avoid startup overhead.

Usage:
    aer "your text here"            # Encrypt and upload (primary interface)
    aer find <query>                # Search and rank contexts
    aer --help                      # Show help
"""

import sys


def print_help() -> None:
    """Print help message."""
    print("""aer - end-to-end encrypted context capture

Usage:
    aer "your text here"          Encrypt and upload text

Commands:
    aer summary <text>            Upload a short summary only
    aer file <path> [--summary]   Upload a UTF-8 text file
    aer find <query> [--full]     Search contexts, ranked by relevance
                                    --full       Print the best match in full
    aer filter <path> [options]   Print a file with unrelated blocks removed
                                    --tags a,b   Boost blocks mentioning tags
                                    --server     Ask the API for tags
    aer health                    Check configuration and API

Options:
    aer --help, -h                Show this help
    aer --version, -v             Show version

Environment:
    AER_TOKEN                     Auth token (aer_{userId})
    AER_API_URL                   API base URL
    AER_LOG_LEVEL                 Log level (default WARNING)

Examples:
    aer "Notes from the design review"
    echo "piped text" | aer
    aer find "redis caching"

Content is encrypted before it leaves this machine.""")


def print_version() -> None:
    """Print version."""
    from aer import __version__
    print(f"aer {__version__}")


def setup_logging() -> None:
    """Configure logging for CLI runs."""
    import logging
    import os

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=os.environ.get("AER_LOG_LEVEL", "WARNING").upper(),
    )


def capture(artifact) -> int:
    """Upload an artifact and report the outcome."""
    import asyncio
    import json

    from aer.config import load_settings
    from aer.errors import AerError
    from aer.upload import upload_artifact

    try:
        result = asyncio.run(upload_artifact(artifact, settings=load_settings()))
    except (AerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if isinstance(result, dict):
        print(result.get("id") or result.get("message") or json.dumps(result))
    else:
        print(json.dumps(result))
    return 0


def cmd_summary(args: list[str]) -> int:
    """Upload a summary-only capture."""
    from aer.ingress import summary_artifact

    text = " ".join(args)
    if not text.strip():
        print("Usage: aer summary <text>", file=sys.stderr)
        return 1
    return capture(summary_artifact(text, {"context": "cli_summary"}))


def cmd_file(args: list[str]) -> int:
    """Upload a text file."""
    from pathlib import Path

    from aer.ingress import file_artifact, summary_artifact

    summary_only = "--summary" in args
    paths = [a for a in args if a != "--summary"]
    if not paths:
        print("Usage: aer file <path> [--summary]", file=sys.stderr)
        return 1

    path = Path(paths[0])
    try:
        artifact = file_artifact(path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    if summary_only:
        artifact = {
            **summary_artifact(artifact["content"], {"context": "cli_file_summary"}),
            "fileName": artifact["fileName"],
            "fileType": artifact["fileType"],
        }
    return capture(artifact)


def cmd_find(args: list[str]) -> int:
    """Search and rank contexts."""
    import asyncio

    from aer.config import load_settings
    from aer.crypto import key_for_settings
    from aer.errors import AerError
    from aer.search import assist_search
    from aer.surfacing import format_results, full_context

    full = "--full" in args
    words = [a for a in args if a != "--full"]
    if not words:
        print("Usage: aer find <query> [--full]", file=sys.stderr)
        return 1

    query = " ".join(words)[:500]

    try:
        settings = load_settings()
        key = key_for_settings(settings)
        ranked = asyncio.run(assist_search(query, settings))
    except (AerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not full:
        print(format_results(query, ranked, key))
        return 0

    # Best match only, ready to paste into a prompt
    if not ranked:
        print(f"No contexts matching '{query}'.")
        return 0
    context = full_context(ranked[0], key, query)
    if context is None:
        print("Error: Unable to decrypt this context", file=sys.stderr)
        return 1
    print(context)
    return 0


def cmd_filter(args: list[str]) -> int:
    """Print a file with unrelated blocks removed."""
    import asyncio
    from pathlib import Path

    from aer.content_filter import filter_by_first_half, filter_with_server_tags

    tags: list[str] = []
    use_server = False
    paths = []

    # Parse arguments
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--tags" and i + 1 < len(args):
            tags = [t.strip() for t in args[i + 1].split(",") if t.strip()]
            i += 2
        elif arg == "--server":
            use_server = True
            i += 1
        else:
            paths.append(arg)
            i += 1

    if not paths:
        print("Usage: aer filter <path> [--tags a,b] [--server]", file=sys.stderr)
        return 1

    path = Path(paths[0])
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return 1

    if use_server:
        from aer.config import load_settings

        try:
            settings = load_settings()
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(asyncio.run(filter_with_server_tags(text, path.stem, settings)))
    else:
        print(filter_by_first_half(text, tags, path.stem))
    return 0


def cmd_health() -> int:
    """Show configuration and API status."""
    import asyncio

    from aer.config import load_settings
    from aer.health import format_health_report, run_health_check

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    checks = asyncio.run(run_health_check(settings))
    print(format_health_report(checks))
    return 0 if all(status != "✗" for status, _ in checks.values()) else 1


def main() -> int:
    """
    Main entry point.

    Optimized for minimal startup time on the capture path.
    """
    args = sys.argv[1:]
    setup_logging()

    # No args - check for piped input
    if not args:
        if not sys.stdin.isatty():
            # Reading from pipe
            text = sys.stdin.read().strip()
            if text:
                return capture(text)
        print_help()
        return 0

    # Handle flags and commands
    first_arg = args[0]

    if first_arg in ("--help", "-h", "help"):
        print_help()
        return 0

    if first_arg in ("--version", "-v", "version"):
        print_version()
        return 0

    # Subcommands (lazy import to keep startup fast)
    if first_arg in ("summary", "--summary"):
        return cmd_summary(args[1:])

    if first_arg == "file":
        return cmd_file(args[1:])

    if first_arg == "find":
        return cmd_find(args[1:])

    if first_arg == "filter":
        return cmd_filter(args[1:])

    if first_arg == "health":
        return cmd_health()

    # Everything else is text to capture
    # Join all args (allows: aer Notes from the design review)
    text = " ".join(args)

    if not text.strip():
        print("Error: Empty text", file=sys.stderr)
        return 1

    return capture(text)


if __name__ == "__main__":
    sys.exit(main())
