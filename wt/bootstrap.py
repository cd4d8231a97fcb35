"""
First-time setup of a repository in the bare-store layout.

    <root>/.bare               bare clone
    <root>/.git                "gitdir: <root>/.bare"
    <root>/.hooks/post-add.sh  generated hook
    <root>/<branch>/           one directory per worktree
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from wt.config import Config
from wt.core import BARE_DIR, DEFAULT_BASE_BRANCH, REVIEW_WORKTREE, WorktreeManager
from wt.exceptions import ConfigError, InvalidRepositoryError, WTError
from wt.utils import git as gitutil
from wt.utils.remote import DEFAULT_HOST, build_repository_url, is_ssh_url, resolve_ssh_auth


@dataclass(frozen=True)
class RepoIdentifier:
    """A repository named as [domain/]org/name."""

    domain: str
    org: str
    name: str
    branch: str = DEFAULT_BASE_BRANCH

    @classmethod
    def parse(cls, text: str, branch: str = DEFAULT_BASE_BRANCH) -> 'RepoIdentifier':
        parts = text.split('/')
        if len(parts) == 3:
            domain, org, name = parts
        elif len(parts) == 2:
            domain = DEFAULT_HOST
            org, name = parts
        else:
            raise InvalidRepositoryError(
                f"invalid repository format '{text}'. Expected [domain/]org/repo"
            )

        if not all((domain, org, name)):
            raise InvalidRepositoryError(
                f"invalid repository format '{text}'. Expected [domain/]org/repo"
            )
        return cls(domain=domain, org=org, name=name, branch=branch or DEFAULT_BASE_BRANCH)

    @property
    def is_enterprise(self) -> bool:
        return self.domain != DEFAULT_HOST

    def __str__(self) -> str:
        return f"{self.domain}/{self.org}/{self.name}"


@dataclass
class ClonePlan:
    """Where to clone from and which remotes to add afterwards."""

    clone_url: str
    base_remote: str
    extra_remotes: Dict[str, str]


def plan_clone(repo: RepoIdentifier, config: Config) -> ClonePlan:
    """Decide clone source and remotes from the host configuration."""
    host = config.get_host_config(repo.domain)
    method = host.clone_method
    account = host.account

    def url(owner: str) -> str:
        return build_repository_url(method, repo.domain, owner, repo.name)

    if repo.is_enterprise:
        if not account:
            return ClonePlan(url(repo.org), 'origin', {})
        return ClonePlan(url(account), 'upstream', {'upstream': url(repo.org)})

    if not account:
        raise ConfigError(
            f"no account configured for {repo.domain}. "
            f"Use 'wt config set-account {repo.domain} <username>' to configure"
        )

    extra = {}
    if account != repo.org:
        extra[account] = url(account)
    return ClonePlan(url(repo.org), 'origin', extra)


def write_gitdir_file(root: Path) -> Path:
    """Point <root>/.git at the bare store."""
    pointer = root / '.git'
    try:
        pointer.write_text(f"gitdir: {root / BARE_DIR}")
    except OSError as e:
        raise WTError(f"Failed to write {pointer}: {e}") from e
    return pointer


def setup_repository(
    repo: RepoIdentifier,
    config: Config,
    parent: Optional[Path] = None,
) -> Path:
    """Clone repo into <parent>/<name> and create its initial worktrees.

    Nothing is rolled back on failure; whatever was created stays on disk.
    """
    root = (Path(parent) if parent else Path.cwd()).resolve() / repo.name
    bare = root / BARE_DIR
    if bare.exists():
        raise WTError(f"{root} is already set up ({bare} exists)")

    plan = plan_clone(repo, config)
    account = config.get_account(repo.domain)

    if repo.is_enterprise and not account:
        print(f"No account configured for {repo.domain}, cloning directly from {repo.org}/{repo.name}")
        print(f"Cloning {repo} repository directly and hiding .git internals")
    elif repo.is_enterprise:
        print(f"Cloning forked {repo.name} repository from {repo.domain} and hiding .git internals")
    else:
        print(f"Cloning {repo.name} repository and configuring remotes")

    env = None
    if is_ssh_url(plan.clone_url):
        env = resolve_ssh_auth().env()

    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WTError(f"Failed to create {root}: {e}") from e

    gitutil.clone_bare(plan.clone_url, bare, env=env)

    for name, url in plan.extra_remotes.items():
        if name == 'upstream':
            print("Adding upstream remote")
        else:
            print(f"Adding {name} remote for your fork")
        gitutil.add_remote(bare, name, url)

    write_gitdir_file(root)

    manager = WorktreeManager(root)
    print("Creating worktree hooks")
    manager.create_hooks(plan.base_remote, repo.branch)

    print(f"Creating worktree for base branch {repo.branch}")
    gitutil.worktree_add(bare, manager.path_for(repo.branch), branch=repo.branch)

    print("Creating worktree for a review branch")
    gitutil.worktree_add(bare, manager.path_for(REVIEW_WORKTREE), force=True)

    return root
