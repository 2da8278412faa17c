import unittest

from commit_wizard.grouping.group_model import (
    ChangedFile,
    ChangeGroup,
    CommitType,
    FileStatus,
    parse_commit_type,
)


def make_group(**kwargs) -> ChangeGroup:
    defaults = dict(
        commit_type=CommitType.FEAT,
        scope=None,
        files=[ChangedFile("src/api/login.py", FileStatus.INDEX_MODIFIED)],
        ticket=None,
        description="add login",
        body_lines=[],
    )
    defaults.update(kwargs)
    return ChangeGroup(**defaults)


class TestCommitType(unittest.TestCase):
    def test_order_and_tags(self) -> None:
        tags = [member.value for member in CommitType]
        self.assertEqual(
            tags,
            ["feat", "fix", "docs", "style", "refactor", "perf", "test", "chore", "ci", "build"],
        )
        self.assertEqual(CommitType.FEAT.order, 0)
        self.assertEqual(CommitType.BUILD.order, 9)

    def test_parse_commit_type(self) -> None:
        self.assertIs(parse_commit_type("fix"), CommitType.FIX)
        self.assertIs(parse_commit_type(" DOCS "), CommitType.DOCS)
        self.assertIs(parse_commit_type("unknown"), CommitType.FEAT)
        self.assertIs(parse_commit_type(""), CommitType.FEAT)


class TestChangedFile(unittest.TestCase):
    def test_predicates_use_index_and_worktree_bits(self) -> None:
        self.assertTrue(ChangedFile("a", FileStatus.INDEX_NEW).is_new())
        self.assertTrue(ChangedFile("a", FileStatus.WT_NEW).is_new())
        self.assertTrue(ChangedFile("a", FileStatus.WT_MODIFIED).is_modified())
        self.assertTrue(ChangedFile("a", FileStatus.INDEX_DELETED).is_deleted())
        self.assertTrue(ChangedFile("a", FileStatus.INDEX_RENAMED).is_renamed())

    def test_multiple_bits(self) -> None:
        changed = ChangedFile("a", FileStatus.INDEX_NEW | FileStatus.WT_MODIFIED)
        self.assertTrue(changed.is_new())
        self.assertTrue(changed.is_modified())
        self.assertFalse(changed.is_deleted())
        self.assertFalse(changed.is_renamed())

    def test_current_has_no_flags(self) -> None:
        changed = ChangedFile("a")
        self.assertFalse(changed.is_new() or changed.is_modified() or changed.is_deleted() or changed.is_renamed())


class TestHeader(unittest.TestCase):
    def test_header_with_scope_and_ticket(self) -> None:
        group = make_group(scope="api", ticket="LU-1")
        self.assertEqual(group.header(), "feat(api): LU-1: add login")

    def test_header_without_scope_or_ticket(self) -> None:
        group = make_group(commit_type=CommitType.FIX, description="handle empty token")
        self.assertEqual(group.header(), "fix: handle empty token")

    def test_long_description_is_truncated_with_ellipsis(self) -> None:
        group = make_group(description="x" * 100)
        header = group.header()
        self.assertEqual(len(header.encode("utf-8")), 72)
        self.assertTrue(header.endswith("..."))
        self.assertEqual(header, "feat: " + "x" * 63 + "...")

    def test_description_that_fits_exactly_is_kept(self) -> None:
        description = "y" * (72 - len("feat: "))
        group = make_group(description=description)
        self.assertEqual(group.header(), "feat: " + description)

    def test_truncation_counts_bytes_and_keeps_characters_whole(self) -> None:
        group = make_group(commit_type=CommitType.FIX, description="ä" * 50)
        header = group.header()
        self.assertEqual(header, "fix: " + "ä" * 32 + "...")
        self.assertLessEqual(len(header.encode("utf-8")), 72)

    def test_prefix_longer_than_budget_does_not_fail(self) -> None:
        group = make_group(scope="s" * 80, description="add login")
        header = group.header()
        self.assertTrue(header.endswith("..."))
        self.assertTrue(header.startswith("feat(" + "s" * 80 + "): "))

    def test_empty_files_do_not_fail(self) -> None:
        group = make_group(files=[])
        self.assertEqual(group.header(), "feat: add login")
        self.assertEqual(group.paths, [])


class TestFullMessage(unittest.TestCase):
    def test_full_message_example(self) -> None:
        group = make_group(scope="api", ticket="LU-1", body_lines=["validate token"])
        self.assertEqual(group.full_message(), "feat(api): LU-1: add login\n\n- validate token\n")

    def test_no_body_block_without_body_lines(self) -> None:
        group = make_group(scope="api")
        message = group.full_message()
        self.assertEqual(message, "feat(api): add login")
        self.assertNotIn("\n", message)

    def test_multiple_body_lines(self) -> None:
        group = make_group(body_lines=["first", "second"])
        self.assertEqual(group.full_message(), "feat: add login\n\n- first\n- second\n")


class TestSetFromCommitText(unittest.TestCase):
    def test_round_trip_of_rendered_message(self) -> None:
        group = make_group(scope="api", ticket="LU-1", body_lines=["validate token", "store session"])
        rendered = group.full_message()
        group.set_from_commit_text(rendered)
        self.assertEqual(group.description, "add login")
        self.assertEqual(group.body_lines, ["validate token", "store session"])
        self.assertEqual(group.full_message(), rendered)
        self.assertNotIn("- -", group.full_message())

    def test_description_after_last_separator(self) -> None:
        group = make_group()
        group.set_from_commit_text("feat(api): LU-1: add token refresh")
        self.assertEqual(group.description, "add token refresh")
        self.assertEqual(group.body_lines, [])

    def test_header_without_separator_is_the_description(self) -> None:
        group = make_group()
        group.set_from_commit_text("rework the login flow\n\n- split handlers")
        self.assertEqual(group.description, "rework the login flow")
        self.assertEqual(group.body_lines, ["split handlers"])

    def test_plain_and_bulleted_body_lines_converge(self) -> None:
        group = make_group()
        group.set_from_commit_text("feat: add login\n\n- bulleted note\n  plain note  \n\n")
        self.assertEqual(group.body_lines, ["bulleted note", "plain note"])
        self.assertEqual(group.full_message(), "feat: add login\n\n- bulleted note\n- plain note\n")

    def test_empty_text_keeps_description_and_clears_body(self) -> None:
        group = make_group(body_lines=["old"])
        group.set_from_commit_text("")
        self.assertEqual(group.description, "add login")
        self.assertEqual(group.body_lines, [])


if __name__ == "__main__":
    unittest.main()
