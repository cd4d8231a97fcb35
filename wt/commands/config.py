"""
Command for managing per-host accounts and clone methods.
"""

from pathlib import Path

from wt.config import load_config, parse_clone_method, save_config


def set_account(config_path: Path, domain: str, account: str) -> int:
    """Set the account used on domain."""
    config = load_config(config_path)
    config.set_account(domain, account)
    save_config(config, config_path)
    print(f"Set account for {domain} to {account}")
    return 0


def set_clone_method(config_path: Path, domain: str, method: str) -> int:
    """Set whether domain is cloned over http or ssh."""
    clone_method = parse_clone_method(method)
    config = load_config(config_path)
    config.set_clone_method(domain, clone_method)
    save_config(config, config_path)
    print(f"Set clone method for {domain} to {clone_method}")
    return 0


def list_hosts(config_path: Path) -> int:
    """Print every configured host."""
    hosts = load_config(config_path).list_hosts()
    if not hosts:
        print("No hosts configured")
        return 0

    print("Configured hosts:")
    for domain in sorted(hosts):
        host = hosts[domain]
        print(f"  {domain}: {host.account} (clone: {host.clone_method})")
    return 0
