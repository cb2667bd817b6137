"""Test repository operations against scripted git output."""

import unittest
from io import StringIO
from typing import Dict, List, Tuple

from rich.console import Console

from gitrepo.git_basic import CommandFailure, GitCommandRunner, GitError
from gitrepo.git_parser import MalformedOutputError, ParseContextError
from gitrepo.git_repo import FetchFailure, GitRepo
from gitrepo.models import Action, CommandResult, Commit, File


class ScriptedRunner(GitCommandRunner):
    """Runner that answers commands from a table instead of spawning git."""

    def __init__(self, responses: Dict[Tuple[str, ...], Tuple[str, str, int]]):
        super().__init__("/work/repo", console=Console(file=StringIO()))
        self.responses = responses
        self.calls: List[Tuple[str, ...]] = []

    def run_command(self, args, allow_failure=False):
        key = tuple(args.split()) if isinstance(args, str) else tuple(args)
        self.calls.append(key)
        stdout, stderr, returncode = self.responses.get(key, ("", "", 0))
        result = CommandResult(" ".join(key), stdout, stderr, returncode)
        if result.failed:
            if allow_failure:
                return result
            raise CommandFailure(result, self._history)
        self._history.append(result)
        return result


def make_repo(responses=None, mainline="master"):
    output = StringIO()
    runner = ScriptedRunner(responses or {})
    repo = GitRepo(
        "/work/repo", mainline_branch=mainline, console=Console(file=output), runner=runner
    )
    return repo, runner, output


ON_MASTER = {("rev-parse", "--abbrev-ref", "HEAD"): ("master\n", "", 0)}
ON_FEATURE = {("rev-parse", "--abbrev-ref", "HEAD"): ("feature\n", "", 0)}


class TestBranchesAndTags(unittest.TestCase):
    def test_switch_branch(self):
        """Test switching branches uses create-or-reset checkout."""
        repo, runner, _ = make_repo()

        repo.switch_branch("feature")

        self.assertEqual(runner.calls, [("checkout", "--quiet", "-B", "feature")])

    def test_remove_branch(self):
        """Test removing a branch force-deletes it."""
        repo, runner, _ = make_repo()

        repo.remove_branch("feature")

        self.assertEqual(runner.calls, [("branch", "--quiet", "-D", "feature")])

    def test_list_branches_strips_marker(self):
        """Test branch names come back without the checked-out marker."""
        repo, _, _ = make_repo({("branch",): ("  feature\n* master\n", "", 0)})

        self.assertEqual(repo.list_branches(), ["feature", "master"])

    def test_tags(self):
        """Test tagging HEAD and listing tags."""
        repo, runner, _ = make_repo({("tag",): ("v1.0\nv1.1\n", "", 0)})

        repo.tag_head("v1.2")

        self.assertEqual(runner.calls, [("tag", "v1.2")])
        self.assertEqual(repo.get_tag_list(), ["v1.0", "v1.1"])

    def test_unreadable_tag_list(self):
        """Test a tag listing with a blank name is reported as a tag list failure."""
        repo, _, _ = make_repo({("tag",): ("v1.0\n  \n", "", 0)})

        with self.assertRaises(GitError) as ctx:
            repo.get_tag_list()

        self.assertIn("Get tag list failed", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, MalformedOutputError)

    def test_tag_failure_propagates(self):
        """Test tagging with an existing name raises the command failure."""
        repo, _, _ = make_repo({("tag", "v1.0"): ("", "fatal: tag 'v1.0' already exists\n", 128)})

        with self.assertRaises(CommandFailure):
            repo.tag_head("v1.0")

    def test_current_branch_and_head(self):
        """Test current branch and HEAD id are read without surrounding whitespace."""
        repo, _, _ = make_repo(
            {
                ("rev-parse", "--abbrev-ref", "HEAD"): ("  feature \n", "", 0),
                ("rev-parse", "HEAD"): ("abc123\n", "", 0),
            }
        )

        self.assertEqual(repo.current_branch(), "feature")
        self.assertEqual(repo.get_head_commit_id(), "abc123")

    def test_is_merged(self):
        """Test merged state is read from the branches merged into the mainline."""
        repo, _, _ = make_repo({("branch", "--merged", "master"): ("  done\n* master\n", "", 0)})

        self.assertTrue(repo.is_merged("done"))
        self.assertFalse(repo.is_merged("pending"))


class TestHistoryQueries(unittest.TestCase):
    def test_commit_ids_are_chronological(self):
        """Test commit ids are returned oldest first."""
        repo, _, _ = make_repo({("log", "--pretty=%H", "feature"): ("c3\nc2\nc1\n", "", 0)})

        self.assertEqual(repo.get_commit_ids("feature"), ["c1", "c2", "c3"])

    def test_base_commit_has_no_files(self):
        """Test the base commit gets no files and its diff is never requested."""
        diff = ("diff-tree", "--no-commit-id", "--name-status", "-r")
        repo, runner, _ = make_repo(
            {
                ("log", "--pretty=%H", "feature"): ("c2\nc1\n", "", 0),
                diff + ("c1",): ("A\tone.py\nA\ttwo.py\n", "", 0),
                diff + ("c2",): ("M\tone.py\nD\ttwo.py\n", "", 0),
            }
        )

        commits = repo.get_commits("feature")

        self.assertEqual(
            commits,
            [
                Commit("c1"),
                Commit(
                    "c2",
                    (File("one.py", Action.MODIFY, "c2"), File("two.py", Action.DELETE, "c2")),
                ),
            ],
        )
        self.assertNotIn(diff + ("c1",), runner.calls)

    def test_files_in_commit_parse_failure_names_commit(self):
        """Test an unparseable diff names the commit it came from."""
        repo, _, _ = make_repo(
            {("diff-tree", "--no-commit-id", "--name-status", "-r", "c9"): ("X\tweird\n", "", 0)}
        )

        with self.assertRaises(ParseContextError) as ctx:
            repo.get_files_in_commit("c9")

        self.assertEqual(ctx.exception.commit_id, "c9")

    def test_uncommitted_files(self):
        """Test working tree changes are parsed from short status."""
        repo, _, _ = make_repo(
            {("status", "--short"): ("M  file.txt\nR  old.txt -> new.txt\n?? notes.md\n", "", 0)}
        )

        self.assertEqual(
            repo.get_uncommitted_files(),
            [
                File("file.txt", Action.MODIFY),
                File("new.txt", Action.RENAME),
                File("notes.md", Action.ADD),
            ],
        )

    def test_file_contents_strip_one_newline(self):
        """Test file contents lose exactly one trailing newline."""
        repo, _, _ = make_repo({("show", "c1:README"): ("hello\nworld\n", "", 0)})

        self.assertEqual(repo.get_file_contents("c1", "README"), "hello\nworld")

    def test_file_contents_missing_path(self):
        """Test reading a missing path raises the command failure."""
        repo, _, _ = make_repo(
            {("show", "c1:nope"): ("", "fatal: path 'nope' does not exist in 'c1'\n", 128)}
        )

        with self.assertRaises(CommandFailure):
            repo.get_file_contents("c1", "nope")


class TestCommit(unittest.TestCase):
    def test_commit_stages_files_and_stamps_head(self):
        """Test committing stages each file and stamps the new HEAD id."""
        repo, runner, _ = make_repo({("rev-parse", "HEAD"): ("f00d\n", "", 0)})
        files = [File("a.py", Action.MODIFY), File("b.py", Action.ADD)]

        commit = repo.commit(files, "fix bug")

        self.assertEqual(
            runner.calls,
            [
                ("add", "a.py"),
                ("add", "b.py"),
                ("commit", "-m", "fix bug"),
                ("rev-parse", "HEAD"),
            ],
        )
        self.assertEqual(commit.id, "f00d")
        self.assertEqual(commit.files, tuple(f.with_commit_id("f00d") for f in files))

    def test_staging_failure_stops_commit(self):
        """Test a failed add prevents the commit."""
        repo, runner, _ = make_repo(
            {("add", "gone.py"): ("", "fatal: pathspec 'gone.py' did not match any files\n", 128)}
        )

        with self.assertRaises(CommandFailure):
            repo.commit([File("gone.py", Action.ADD)], "msg")

        self.assertNotIn(("commit", "-m", "msg"), runner.calls)

    def test_reset_keeps_history(self):
        """Test hard and soft resets are recorded in history."""
        repo, runner, _ = make_repo()
        repo.add_file("a.py")

        repo.reset("HEAD~1")
        repo.reset("HEAD", hard=False)

        self.assertEqual(runner.calls[1:], [("reset", "--hard", "HEAD~1"), ("reset", "HEAD")])
        self.assertEqual(len(repo.history), 3)


class TestRemote(unittest.TestCase):
    def test_push_and_pull(self):
        """Test push and pull run quietly against the remote."""
        repo, runner, _ = make_repo()

        repo.push_all()
        repo.pull()

        self.assertEqual(
            runner.calls, [("push", "--quiet", "--all", "origin"), ("pull", "--quiet")]
        )

    def test_push_failure_propagates(self):
        """Test a rejected push raises the command failure."""
        repo, _, _ = make_repo(
            {("push", "--quiet", "--all", "origin"): ("", "error: failed to push\n", 1)}
        )

        with self.assertRaises(CommandFailure):
            repo.push_all()


class TestMerge(unittest.TestCase):
    def test_local_merge_on_mainline(self):
        """Test merging while on the mainline does not switch branches."""
        repo, runner, output = make_repo(dict(ON_MASTER))

        self.assertTrue(repo.merge("feature"))

        self.assertEqual(runner.calls[-1], ("merge", "feature"))
        self.assertNotIn(("checkout", "--quiet", "master"), runner.calls)
        self.assertNotIn("not on the master branch", output.getvalue())

    def test_switches_to_mainline_with_warning(self):
        """Test merging from another branch checks out the mainline and warns."""
        repo, runner, output = make_repo(dict(ON_FEATURE))

        repo.merge("feature")

        self.assertIn(("checkout", "--quiet", "master"), runner.calls)
        self.assertNotIn(("checkout", "--quiet", "-B", "master"), runner.calls)
        self.assertIn("You are not on the master branch", output.getvalue())

    def test_conflict_returns_false(self):
        """Test a conflicting merge returns False."""
        responses = dict(ON_MASTER)
        responses[("merge", "feature")] = ("CONFLICT (content): Merge conflict in a.py\n", "", 1)
        repo, _, _ = make_repo(responses)

        self.assertFalse(repo.merge("feature"))

    def test_merge_stderr_returns_false(self):
        """Test merge errors on stderr return False instead of raising."""
        responses = dict(ON_MASTER)
        responses[("merge", "feature")] = ("", "merge: feature - not something we can merge\n", 1)
        repo, _, _ = make_repo(responses)

        self.assertFalse(repo.merge("feature"))

    def test_remote_merge(self):
        """Test a remote merge fetches the branch and merges the tracking ref."""
        repo, runner, _ = make_repo(dict(ON_MASTER))

        self.assertTrue(repo.merge("feature", remote=True))

        self.assertEqual(
            runner.calls[-2:],
            [
                ("fetch", "--quiet", "origin", "feature"),
                (
                    "merge",
                    "origin/feature",
                    "-m",
                    "Merge remote-tracking branch 'origin/feature'",
                ),
            ],
        )

    def test_remote_fetch_failure_is_fatal_and_skips_merge(self):
        """Test a failed fetch raises and no merge is attempted."""
        responses = dict(ON_MASTER)
        responses[("fetch", "--quiet", "origin", "feature")] = (
            "",
            "fatal: couldn't find remote ref feature\n",
            128,
        )
        repo, runner, _ = make_repo(responses)

        with self.assertRaises(FetchFailure) as ctx:
            repo.merge("feature", remote=True)

        self.assertIsInstance(ctx.exception, GitError)
        self.assertEqual(ctx.exception.branch, "feature")
        self.assertIn("couldn't find remote ref", str(ctx.exception))
        self.assertFalse(any(call[0] == "merge" for call in runner.calls))

    def test_merge_theirs(self):
        """Test a prefer-theirs merge runs on the configured mainline."""
        repo, runner, _ = make_repo(dict(ON_MASTER), mainline="main")

        repo.merge_theirs("feature")

        self.assertIn(("checkout", "--quiet", "main"), runner.calls)
        self.assertEqual(runner.calls[-1], ("merge", "feature", "-s", "recursive", "-Xtheirs"))


if __name__ == "__main__":
    unittest.main()
