"""Raw run-tree construction tests: walking, reserved names, failures, cycles."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from nfsandbox.pipelines import PipelineRunContext
from nfsandbox.run_tree import (
    NodeRole,
    NodeType,
    build_run_tree,
    decorate_run_folder,
    list_run_directory,
    structure_of,
)
from nfsandbox.run_tree import fs as run_tree_fs


class BuildRunTreeTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.storage = Path(self._tmp.name).resolve()
        self.root = self.storage / "demo"
        task = self.root / "run" / "ab" / "cdef1234"
        task.mkdir(parents=True)
        (task / ".command.run").write_text("# NEXTFLOW TASK: sayHello (1)\n", encoding="utf-8")
        (task / ".exitcode").write_text("0", encoding="utf-8")
        (self.root / "main.nf").write_text("workflow {}\n", encoding="utf-8")
        (self.root / "settings.json").write_text("{}\n", encoding="utf-8")
        (self.root / ".nextflow").mkdir()
        (self.root / ".nextflow" / "history").write_text("x\n", encoding="utf-8")
        (self.root / "run" / ".nextflow").mkdir()
        self.pipeline = PipelineRunContext(name="demo", storage_path=self.storage)

    async def test_builds_full_depth_tree_tagged_with_pipeline(self) -> None:
        tree = await build_run_tree(self.root, self.pipeline, role=NodeRole.PIPELINE)

        self.assertIs(tree.role, NodeRole.PIPELINE)
        self.assertEqual([child.name for child in tree.children], ["run", "main.nf"])
        run = tree.children[0]
        task = run.children[0].children[0]
        self.assertEqual(task.path, self.root / "run" / "ab" / "cdef1234")
        self.assertEqual([child.name for child in task.children], [".command.run", ".exitcode"])
        self.assertTrue(all(child.pipeline is self.pipeline for child in task.children))
        self.assertIs(task.children[0].node_type, NodeType.FILE)
        self.assertIsNotNone(task.mtime_ns)

    async def test_reserved_names_are_hidden_at_every_level(self) -> None:
        tree = await build_run_tree(self.root, self.pipeline)

        seen: list[str] = []
        pending = [tree]
        while pending:
            node = pending.pop()
            seen.append(node.name)
            pending.extend(node.children)
        self.assertNotIn("settings.json", seen)
        self.assertNotIn(".nextflow", seen)
        self.assertNotIn("history", seen)

    async def test_rebuilding_unchanged_directory_is_structurally_equal(self) -> None:
        first = await build_run_tree(self.root, self.pipeline)
        second = await build_run_tree(self.root, self.pipeline)

        self.assertIsNot(first, second)
        self.assertEqual(structure_of(first), structure_of(second))

    async def test_unreadable_subtree_yields_empty_children_without_aborting(self) -> None:
        broken = self.root / "run" / "ab"
        real_list = list_run_directory

        def flaky_list(directory: Path):
            if directory == broken:
                return [], PermissionError("denied")
            return real_list(directory)

        with mock.patch.object(run_tree_fs, "list_run_directory", side_effect=flaky_list):
            with self.assertLogs("nfsandbox.run_tree.fs", level="WARNING"):
                tree = await build_run_tree(self.root, self.pipeline)

        run = tree.children[0]
        self.assertEqual(run.children[0].name, "ab")
        self.assertEqual(run.children[0].children, [])
        self.assertEqual(tree.children[1].name, "main.nf")

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks are required")
    async def test_symlink_cycle_terminates(self) -> None:
        loop_link = self.root / "run" / "loop"
        try:
            os.symlink(self.root / "run", loop_link, target_is_directory=True)
        except OSError:
            self.skipTest("cannot create symlinks here")

        tree = await build_run_tree(self.root, self.pipeline)

        run = tree.children[0]
        loop = next(child for child in run.children if child.name == "loop")
        self.assertTrue(loop.is_dir)
        self.assertEqual(loop.children, [])

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks are required")
    async def test_staged_input_links_do_not_hide_the_linked_task(self) -> None:
        run_dir = self.storage / "staged" / "run"
        producer = run_dir / "ff" / "aaaaaaaa"
        (producer / "outdir").mkdir(parents=True)
        (producer / "outdir" / "result.txt").write_text("r\n", encoding="utf-8")
        (producer / ".command.run").write_text("# NEXTFLOW TASK: make (1)\n", encoding="utf-8")
        (producer / ".exitcode").write_text("0", encoding="utf-8")
        consumer = run_dir / "01" / "bbbbbbbb"
        consumer.mkdir(parents=True)
        (consumer / ".command.run").write_text("# NEXTFLOW TASK: use (1)\n", encoding="utf-8")
        (consumer / ".exitcode").write_text("0", encoding="utf-8")
        try:
            os.symlink(producer / "outdir", consumer / "outdir", target_is_directory=True)
            os.symlink(producer, consumer / "upstream", target_is_directory=True)
        except OSError:
            self.skipTest("cannot create symlinks here")
        real_list = list_run_directory

        def sorted_list(directory: Path):
            children, error = real_list(directory)
            return sorted(children, key=lambda child: child.name), error

        # The consumer's links are walked before the producer folder itself.
        with mock.patch.object(run_tree_fs, "list_run_directory", side_effect=sorted_list):
            tree = await build_run_tree(run_dir, self.pipeline)

        producer_node = next(c for c in tree.children if c.name == "ff").children[0]
        self.assertIn(".command.run", [child.name for child in producer_node.children])
        consumer_node = next(c for c in tree.children if c.name == "01").children[0]
        upstream = next(c for c in consumer_node.children if c.name == "upstream")
        self.assertIn(".command.run", [child.name for child in upstream.children])
        decorated = decorate_run_folder(tree)
        self.assertEqual([group.name for group in decorated.children], ["make", "use"])

    async def test_children_are_ordered_directories_first_then_by_name(self) -> None:
        extra = self.root / "run"
        (extra / "zeta.txt").write_text("z", encoding="utf-8")
        (extra / "alpha.txt").write_text("a", encoding="utf-8")
        (extra / "work").mkdir()

        tree = await build_run_tree(self.root / "run", self.pipeline)

        self.assertEqual([child.name for child in tree.children], ["ab", "work", "alpha.txt", "zeta.txt"])


class ListRunDirectoryTests(unittest.TestCase):
    def test_missing_directory_reports_scan_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            children, error = list_run_directory(Path(tmp) / "missing")

        self.assertEqual(children, [])
        self.assertIsInstance(error, OSError)


if __name__ == "__main__":
    unittest.main()
