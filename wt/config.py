"""
Per-user configuration: which account to use on each host and how to clone.

The file lives at ~/.config/worktree/settings.toml unless overridden by the
--config flag or the WORKTREE_CONFIG environment variable.
"""

import json
import os
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from wt.exceptions import ConfigError

DEFAULT_DOMAIN = 'github.com'
CONFIG_ENV_VAR = 'WORKTREE_CONFIG'


class CloneMethod(str, Enum):
    HTTP = 'http'
    SSH = 'ssh'

    def __str__(self) -> str:
        return self.value


def parse_clone_method(value: str) -> CloneMethod:
    """Parse a clone method name, case-insensitively."""
    try:
        return CloneMethod(value.lower())
    except ValueError:
        raise ConfigError(f"invalid clone method: {value} (valid options: http, ssh)") from None


@dataclass
class HostConfig:
    account: str = ''
    clone_method: CloneMethod = CloneMethod.HTTP


@dataclass
class Config:
    hosts: Dict[str, HostConfig] = field(default_factory=dict)

    def get_host_config(self, domain: str) -> HostConfig:
        """Host settings for domain, or the defaults when none are stored."""
        domain = domain or DEFAULT_DOMAIN
        host = self.hosts.get(domain)
        if host is None:
            return HostConfig()
        return HostConfig(host.account, host.clone_method)

    def get_account(self, domain: str) -> str:
        return self.get_host_config(domain).account

    def get_clone_method(self, domain: str) -> CloneMethod:
        return self.get_host_config(domain).clone_method

    def set_account(self, domain: str, account: str) -> None:
        domain = domain or DEFAULT_DOMAIN
        existing = self.hosts.get(domain, HostConfig())
        self.hosts[domain] = HostConfig(account, existing.clone_method)

    def set_clone_method(self, domain: str, method: CloneMethod) -> None:
        domain = domain or DEFAULT_DOMAIN
        existing = self.hosts.get(domain, HostConfig())
        self.hosts[domain] = HostConfig(existing.account, method)

    def list_hosts(self) -> Dict[str, HostConfig]:
        return {domain: HostConfig(h.account, h.clone_method) for domain, h in self.hosts.items()}


def default_config_path() -> Path:
    return Path.home() / '.config' / 'worktree' / 'settings.toml'


def resolve_config_path(override: Optional[str] = None) -> Path:
    """Pick the config file: explicit override, then environment, then default."""
    if override:
        return Path(override).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return default_config_path()


def _from_dict(data: Dict[str, Any]) -> Config:
    config = Config()
    for domain, host in (data.get('hosts') or {}).items():
        if not isinstance(host, dict):
            raise ConfigError(f"invalid host entry for {domain}")
        method = host.get('clone_method') or CloneMethod.HTTP.value
        config.hosts[domain] = HostConfig(
            account=str(host.get('account', '')),
            clone_method=parse_clone_method(str(method)),
        )

    # Older files only had a flat [accounts] table
    for domain, account in (data.get('accounts') or {}).items():
        if domain not in config.hosts:
            config.hosts[domain] = HostConfig(str(account), CloneMethod.HTTP)

    return config


def load_config(path: Path) -> Config:
    """Load configuration from path, creating a default file if missing."""
    path = Path(path)
    if not path.exists():
        config = Config()
        save_config(config, path)
        return config

    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e

    return _from_dict(data)


def save_config(config: Config, path: Path) -> None:
    """Write configuration to path as TOML."""
    path = Path(path)
    lines = ['# wt configuration', '']
    for domain in sorted(config.hosts):
        host = config.hosts[domain]
        lines.append(f'[hosts.{json.dumps(domain)}]')
        lines.append(f'account = {json.dumps(host.account)}')
        lines.append(f'clone_method = {json.dumps(str(host.clone_method))}')
        lines.append('')

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            f.write('\n'.join(lines) + '\n')
    except OSError as e:
        raise ConfigError(f"failed to write config file {path}: {e}") from e
