"""Server configuration CLI commands."""

import requests

from comfyrun.remote.config import ConfigError, ServerConfig, load_server_config, save_server_config


def _mask(api_key):
    if not api_key:
        return "(none)"
    return api_key[:4] + "*" * max(len(api_key) - 4, 4)


def cmd_server_set(args):
    """Store the ComfyUI server connection settings."""
    config = ServerConfig(api_url=args.url, api_key=args.api_key, request_timeout=args.request_timeout)
    path = save_server_config(config)
    print(f"Saved server config to {path}")
    return 0


def cmd_server_show(args):
    """Print the effective server settings."""
    try:
        config = load_server_config()
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    print(f"API URL: {config.api_url}")
    print(f"API key: {_mask(config.api_key)}")
    print(f"Request timeout: {config.request_timeout}s")
    return 0


def cmd_check(args):
    """Probe the configured server."""
    try:
        client = load_server_config().create_client()
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    try:
        stats = client.system_stats()
    except requests.RequestException as e:
        print(f"✗ {client.api_url} is not reachable: {e}")
        return 1

    print(f"✓ {client.api_url} is reachable")
    system = stats.get("system", {}) if isinstance(stats, dict) else {}
    if isinstance(system, dict) and system.get("comfyui_version"):
        print(f"  ComfyUI version: {system['comfyui_version']}")
    return 0


def setup_server_commands(subparsers):
    """Setup server configuration subcommands."""
    server_parser = subparsers.add_parser("server", help="Manage the ComfyUI server connection")
    server_subparsers = server_parser.add_subparsers(dest="server_command")

    set_parser = server_subparsers.add_parser("set", help="Store server connection settings")
    set_parser.add_argument("--url", required=True, help="Base URL of the ComfyUI server")
    set_parser.add_argument("--api-key", help="Bearer token sent with every request")
    set_parser.add_argument("--request-timeout", type=float, default=30.0, help="Per-request timeout in seconds")
    set_parser.set_defaults(func=cmd_server_set)

    show_parser = server_subparsers.add_parser("show", help="Show server connection settings")
    show_parser.set_defaults(func=cmd_server_show)

    check_parser = subparsers.add_parser("check", help="Check that the ComfyUI server is reachable")
    check_parser.set_defaults(func=cmd_check)
