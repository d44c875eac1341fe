"""
CLI script to launch the Book Search HTTP API.

Usage:
    python scripts/run_api.py              # Host and port from config
    python scripts/run_api.py --port 8080  # Custom port
    python scripts/run_api.py --config path/to/config.json
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from book_search.api import create_app
from book_search.core import get_config, ConfigurationError
from book_search.core.config_loader import reload_config


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Launch the Book Search HTTP API"
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Port to run the server on (default: from config)"
    )

    parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (default: from config)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to custom config.json file"
    )

    return parser.parse_args()


def main():
    """Main entry point for launching the API."""
    args = parse_args()

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}")
            sys.exit(1)
        reload_config(config_path)

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        sys.exit(1)

    host = args.host or config.api.host
    port = args.port or config.api.port

    print("=" * 60)
    print("Book Search - HTTP API")
    print("=" * 60)
    print(f"Database path:     {config.paths.database_path}")
    print(f"Files directory:   {config.paths.files_directory}")
    print(f"Starting server on http://{host}:{port}")
    print("Press Ctrl+C to stop")
    print("=" * 60)

    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
