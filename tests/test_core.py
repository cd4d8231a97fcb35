"""
Tests for wt core functionality.
"""

import os
import shutil
import stat
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from wt.core import (
    PROTECTED_NAMES,
    ClearResult,
    RemovalOutcome,
    Worktree,
    WorktreeManager,
    find_repository_root,
)
from wt.exceptions import (
    HookError,
    NotInRepositoryError,
    PartialRemovalError,
    WorktreeExistsError,
    WorktreeNotFoundError,
    WTError,
)
from wt.utils import git as gitutil

from repo_helpers import make_bare_layout


class TempDirTestCase(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir).resolve()
        self.addCleanup(shutil.rmtree, self.temp_dir, ignore_errors=True)

        original_cwd = os.getcwd()
        self.addCleanup(os.chdir, original_cwd)


class TestWorktreeListing(TempDirTestCase):
    """Enumeration and filtering, on plain directories."""

    def setUp(self):
        super().setUp()
        for name in ['main', 'master', 'review', 'feature-1', 'feature-2', 'bugfix', '.hidden', '.bare']:
            (self.temp_path / name).mkdir()
        (self.temp_path / 'file.txt').write_text('test')
        self.manager = WorktreeManager(self.temp_path)

    def test_list_all_skips_hidden_and_files(self):
        """Only visible directories are worktrees."""
        names = sorted(wt.name for wt in self.manager.list_all())
        self.assertEqual(names, ['bugfix', 'feature-1', 'feature-2', 'main', 'master', 'review'])

    def test_list_all_missing_root(self):
        """A root that cannot be read is an error."""
        manager = WorktreeManager(self.temp_path / 'does-not-exist')
        with self.assertRaises(WTError):
            manager.list_all()

    def test_list_removable_excludes_protected(self):
        """main, master and review are never removable."""
        removable = self.manager.list_removable()
        self.assertEqual(sorted(wt.name for wt in removable), ['bugfix', 'feature-1', 'feature-2'])
        for worktree in removable:
            self.assertNotIn(worktree.name, PROTECTED_NAMES)

    def test_list_removable_keeps_order(self):
        all_names = [wt.name for wt in self.manager.list_all()]
        removable = [wt.name for wt in self.manager.list_removable()]
        self.assertEqual(removable, [n for n in all_names if n not in PROTECTED_NAMES])

    def test_worktree_name_matches_branch(self):
        worktree = self.manager.get('feature-1')
        self.assertEqual(worktree.name, 'feature-1')
        self.assertEqual(worktree.branch, 'feature-1')
        self.assertEqual(worktree.path, self.temp_path / 'feature-1')
        self.assertFalse(worktree.protected)
        self.assertTrue(Worktree.from_path(self.temp_path / 'review').protected)

    def test_get_unknown(self):
        with self.assertRaises(WorktreeNotFoundError) as context:
            self.manager.get('nope')
        self.assertIn("worktree 'nope' not found", str(context.exception))

    def test_switch_to(self):
        """switch_to changes this process's directory."""
        path = self.manager.switch_to('bugfix')
        self.assertEqual(path, self.temp_path / 'bugfix')
        self.assertEqual(Path.cwd().resolve(), (self.temp_path / 'bugfix').resolve())

    def test_switch_to_unknown(self):
        with self.assertRaises(WorktreeNotFoundError):
            self.manager.switch_to('nope')


class TestHooks(TempDirTestCase):

    def test_paths(self):
        manager = WorktreeManager(self.temp_path)
        self.assertEqual(manager.hooks_dir, self.temp_path / '.hooks')
        self.assertEqual(manager.post_add_hook, self.temp_path / '.hooks' / 'post-add.sh')

    def test_create_hooks(self):
        """The hook is executable and pulls the base branch."""
        manager = WorktreeManager(self.temp_path)
        manager.create_hooks('upstream', 'main')

        self.assertTrue(manager.hooks_dir.is_dir())
        mode = manager.post_add_hook.stat().st_mode
        self.assertTrue(mode & stat.S_IXUSR)

        expected = (
            "#!/bin/sh\n\n"
            "# Anything here will be ran in the root of a newly created worktree\n"
            "git pull upstream main"
        )
        self.assertEqual(manager.post_add_hook.read_text(), expected)

    def test_run_missing_hook_is_noop(self):
        manager = WorktreeManager(self.temp_path)
        manager.run_post_add_hook(self.temp_path)

    def test_run_failing_hook(self):
        manager = WorktreeManager(self.temp_path)
        manager.hooks_dir.mkdir()
        manager.post_add_hook.write_text('#!/bin/sh\nexit 3\n')

        with self.assertRaises(HookError) as context:
            manager.run_post_add_hook(self.temp_path)
        self.assertEqual(context.exception.path, self.temp_path)
        self.assertIn('status 3', str(context.exception))


class TestFindRepositoryRoot(TempDirTestCase):

    def setUp(self):
        super().setUp()
        self.root = make_bare_layout(self.temp_path)

    def test_from_root(self):
        self.assertEqual(find_repository_root(self.root), self.root)

    def test_from_inside_worktree(self):
        nested = self.root / 'main' / 'src'
        nested.mkdir()
        self.assertEqual(find_repository_root(nested), self.root)

    def test_outside_repository(self):
        outside = self.temp_path / 'elsewhere'
        outside.mkdir()
        with self.assertRaises(NotInRepositoryError):
            find_repository_root(outside)

    def test_discover(self):
        manager = WorktreeManager.discover(self.root / 'main')
        self.assertEqual(manager.root, self.root)
        self.assertEqual(manager.store_path, self.root / '.bare')


class TestWorktreeLifecycle(TempDirTestCase):
    """add/remove/clear against a real bare store."""

    def setUp(self):
        super().setUp()
        self.root = make_bare_layout(self.temp_path)
        self.manager = WorktreeManager(self.root)

    def names(self):
        return sorted(wt.name for wt in self.manager.list_all())

    def test_add_creates_worktree_and_branch(self):
        worktree = self.manager.add('feature-x', 'main')

        self.assertEqual(worktree.path, self.root / 'feature-x')
        self.assertEqual(self.names(), ['feature-x', 'main'])
        self.assertTrue((worktree.path / 'README.md').exists())
        self.assertTrue(gitutil.branch_exists(self.manager.store_path, 'feature-x'))

    def test_add_defaults_base_to_main(self):
        self.manager.add('feature-y')
        self.assertIn('feature-y', self.names())

    def test_add_runs_hook_once_in_new_worktree(self):
        marker = self.temp_path / 'hook-runs.txt'
        self.manager.hooks_dir.mkdir()
        self.manager.post_add_hook.write_text(f'#!/bin/sh\npwd >> "{marker}"\n')

        self.manager.add('feature-x', 'main')

        runs = marker.read_text().splitlines()
        self.assertEqual(len(runs), 1)
        self.assertEqual(Path(runs[0]).resolve(), (self.root / 'feature-x').resolve())

    def test_add_hook_failure_keeps_worktree(self):
        self.manager.hooks_dir.mkdir()
        self.manager.post_add_hook.write_text('#!/bin/sh\nexit 1\n')

        with self.assertRaises(HookError) as context:
            self.manager.add('feature-x', 'main')

        self.assertEqual(context.exception.path, self.root / 'feature-x')
        self.assertIn('feature-x', self.names())

    def test_add_existing_worktree(self):
        self.manager.add('feature-x', 'main')
        with self.assertRaises(WorktreeExistsError):
            self.manager.add('feature-x', 'main')

    def test_add_unknown_base(self):
        with self.assertRaises(WTError):
            self.manager.add('feature-x', 'no-such-branch')
        self.assertNotIn('feature-x', self.names())

    def test_remove_then_add_again(self):
        self.manager.add('feature-x', 'main')

        self.manager.remove('feature-x')
        self.assertEqual(self.names(), ['main'])
        self.assertFalse(gitutil.branch_exists(self.manager.store_path, 'feature-x'))

        self.manager.add('feature-x', 'main')
        self.assertIn('feature-x', self.names())

    def test_remove_unknown(self):
        with self.assertRaises(WorktreeNotFoundError):
            self.manager.remove('nope')

    def test_remove_plain_branch_is_not_found(self):
        """A branch that never had a worktree under the root is left alone."""
        gitutil.create_branch(self.manager.store_path, 'develop', 'main')

        with self.assertRaises(WorktreeNotFoundError):
            self.manager.remove('develop')
        self.assertTrue(gitutil.branch_exists(self.manager.store_path, 'develop'))

    def test_remove_after_directory_deleted_by_hand(self):
        self.manager.add('feature-x', 'main')
        shutil.rmtree(self.root / 'feature-x')

        self.manager.remove('feature-x')

        self.assertFalse(gitutil.branch_exists(self.manager.store_path, 'feature-x'))
        self.assertNotIn(self.root / 'feature-x', gitutil.worktree_paths(self.manager.store_path))

    def test_remove_ignores_protected_names(self):
        """Removal by explicit name is allowed for protected worktrees."""
        gitutil.worktree_add(self.manager.store_path, self.root / 'review', force=True)

        self.manager.remove('review')
        self.assertEqual(self.names(), ['main'])

    def test_remove_branch_failure_then_retry(self):
        self.manager.add('feature-x', 'main')

        with patch('wt.core.gitutil.delete_branch', side_effect=WTError('locked')):
            with self.assertRaises(PartialRemovalError) as context:
                self.manager.remove('feature-x')
        self.assertEqual(context.exception.name, 'feature-x')
        self.assertNotIn('feature-x', self.names())
        self.assertTrue(gitutil.branch_exists(self.manager.store_path, 'feature-x'))

        # Only the branch is left; a second attempt deletes it
        self.manager.remove('feature-x')
        self.assertFalse(gitutil.branch_exists(self.manager.store_path, 'feature-x'))
        self.assertIsNone(gitutil.leftover_branch(self.manager.store_path, 'feature-x'))

    def test_clear_best_effort(self):
        gitutil.worktree_add(self.manager.store_path, self.root / 'review', force=True)
        for name in ['a', 'b', 'c']:
            self.manager.add(name, 'main')
        # Not a registered worktree, so removing it fails
        (self.root / 'junk').mkdir()

        result = self.manager.clear()

        self.assertEqual(sorted(o.name for o in result.succeeded), ['a', 'b', 'c'])
        self.assertEqual([o.name for o in result.failed], ['junk'])
        self.assertEqual(self.names(), ['junk', 'main', 'review'])
        self.assertFalse(result.needs_chdir)

    def test_clear_nothing_to_do(self):
        result = self.manager.clear()
        self.assertEqual(result.outcomes, [])
        self.assertEqual(self.names(), ['main'])

    def test_clear_from_inside_removed_worktree(self):
        self.manager.add('feature-x', 'main')
        os.chdir(self.root / 'feature-x')

        result = self.manager.clear()

        self.assertTrue(result.needs_chdir)
        self.assertEqual(self.names(), ['main'])

    def test_clear_branch_failure_is_recorded(self):
        self.manager.add('a', 'main')
        self.manager.add('b', 'main')

        with patch('wt.core.gitutil.delete_branch', side_effect=WTError('locked')):
            with self.assertLogs('wt.core', level='WARNING') as logs:
                result = self.manager.clear()

        self.assertEqual(result.succeeded, [])
        self.assertEqual(sorted(o.name for o in result.failed), ['a', 'b'])
        self.assertTrue(all('branch not deleted' in o.reason for o in result.failed))
        self.assertEqual(len(logs.records), 2)
        self.assertEqual(self.names(), ['main'])

        self.manager.remove('a')
        self.assertFalse(gitutil.branch_exists(self.manager.store_path, 'a'))
        self.assertTrue(gitutil.branch_exists(self.manager.store_path, 'b'))


class TestClearWithMocks(TempDirTestCase):
    """clear() continues after every kind of per-item failure."""

    def setUp(self):
        super().setUp()
        for name in ['main', 'review', 'a', 'b', 'c']:
            (self.temp_path / name).mkdir()
        self.manager = WorktreeManager(self.temp_path)

    @patch('wt.core.gitutil.delete_branch')
    @patch('wt.core.gitutil.worktree_remove')
    def test_each_item_attempted(self, mock_remove, mock_delete):
        def remove(store, target, force=True):
            if Path(target).name == 'b':
                raise WTError('busy')
            shutil.rmtree(target)

        mock_remove.side_effect = remove

        with self.assertLogs('wt.core', level='WARNING'):
            result = self.manager.clear()

        self.assertEqual(mock_remove.call_count, 3)
        self.assertEqual(sorted(c.args[1] for c in mock_delete.call_args_list), ['a', 'c'])
        self.assertEqual([o.name for o in result.failed], ['b'])
        self.assertEqual(result.failed[0].reason, 'busy')

        names = sorted(wt.name for wt in self.manager.list_all())
        self.assertEqual(names, ['b', 'main', 'review'])

    def test_enumeration_failure_propagates(self):
        manager = WorktreeManager(self.temp_path / 'missing')
        with self.assertRaises(WTError):
            manager.clear()


class TestResults(unittest.TestCase):

    def test_clear_result_views(self):
        result = ClearResult([
            RemovalOutcome('a', True),
            RemovalOutcome('b', False, 'boom'),
        ])
        self.assertEqual([o.name for o in result.succeeded], ['a'])
        self.assertEqual([o.name for o in result.failed], ['b'])
        self.assertFalse(result.needs_chdir)


if __name__ == '__main__':
    unittest.main()
