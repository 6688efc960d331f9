import os

import pytest
from pydantic import ValidationError

from loopcoder.agent import (
    ChangeSetReview, apply_change_set, format_apply_result, normalize_operation_path, parse_file_operations)
from loopcoder.agent.agentic_edit_types import ApplyResult, FileOperation, ProposedChangeSet


def block(payload: str) -> str:
    return f"Here is the plan.\n\n```file_operations\n{payload}\n```\n"


def change_set(*operations) -> ProposedChangeSet:
    return ProposedChangeSet(id="cs-1", operations=tuple(operations), timestamp=0.0)


def test_parse_file_operations():
    result = parse_file_operations(block(
        '[{"action": "CREATE", "path": "src/a.js", "content": "a"},'
        ' {"action": "DELETE", "path": "old"}]'))

    assert result is not None
    assert [(op.action, op.path, op.content) for op in result.operations] == [
        ("CREATE", "src/a.js", "a"), ("DELETE", "old", None)]
    assert result.description == "Suggested multi-file changes"
    assert result.id


@pytest.mark.parametrize("payload", [
    '[{"action": "CREATE", "path": "a.js"',
    '{"action": "CREATE", "path": "a.js", "content": "a"}',
    '[{"action": "MOVE", "path": "a.js"}]',
    '[{"action": "UPDATE", "path": "a.js"}]',
    '[]',
])
def test_invalid_blocks_yield_none(payload):
    assert parse_file_operations(block(payload)) is None


def test_reply_without_block():
    assert parse_file_operations("Just an explanation.") is None


def test_change_set_is_immutable():
    cs = parse_file_operations(block('[{"action": "DELETE", "path": "a"}]'))
    with pytest.raises(ValidationError):
        cs.operations = ()


@pytest.mark.parametrize("path, expected", [
    ("src/a.js", "src/a.js"),
    ("/src/a.js", "src/a.js"),
    ("\\\\src\\a.js", "src\\a.js"),
    ("myapp/src/a.js", "src/a.js"),
    ("/myapp/src/a.js", "src/a.js"),
    ("myapp\\src\\a.js", "src/a.js"),
    ("other/myapp/a.js", "other/myapp/a.js"),
])
def test_normalize_operation_path(path, expected):
    assert normalize_operation_path(path, "/home/me/myapp") == expected


def test_apply_create_update_delete(host, tmp_path):
    (tmp_path / "old.txt").write_text("old")
    (tmp_path / "keep.txt").write_text("v1")
    project_name = os.path.basename(str(tmp_path))

    result = apply_change_set(change_set(
        FileOperation(action="CREATE", path=f"{project_name}/src/new.js", content="new"),
        FileOperation(action="UPDATE", path="/keep.txt", content="v2"),
        FileOperation(action="DELETE", path="old.txt"),
    ), str(tmp_path), host)

    assert (result.succeeded, result.failed) == (3, 0)
    assert (tmp_path / "src" / "new.js").read_text() == "new"
    assert (tmp_path / "keep.txt").read_text() == "v2"
    assert not (tmp_path / "old.txt").exists()


def test_delete_directory_falls_back(host, tmp_path):
    nested = tmp_path / "build" / "cache"
    nested.mkdir(parents=True)
    (nested / "x.bin").write_text("x")

    result = apply_change_set(change_set(FileOperation(action="DELETE", path="build")), str(tmp_path), host)

    assert result.succeeded == 1
    assert not (tmp_path / "build").exists()


def test_failures_do_not_stop_the_batch(host, tmp_path):
    (tmp_path / "blocker").write_text("i am a file")
    operations = [
        FileOperation(action="CREATE", path="blocker/a.txt", content="x"),
        FileOperation(action="CREATE", path="one.txt", content="1"),
        FileOperation(action="UPDATE", path="blocker/b.txt", content="x"),
        FileOperation(action="CREATE", path="two/three.txt", content="3"),
    ]

    result = apply_change_set(change_set(*operations), str(tmp_path), host)

    assert (result.succeeded, result.failed) == (2, 2)
    assert result.failed_paths == ["blocker/a.txt", "blocker/b.txt"]
    assert (tmp_path / "one.txt").read_text() == "1"
    assert (tmp_path / "two" / "three.txt").read_text() == "3"


def test_invalid_paths_and_content_fail_without_stopping_the_batch(host, tmp_path):
    result = apply_change_set(change_set(
        FileOperation(action="CREATE", path="a.txt", content="a"),
        FileOperation(action="CREATE", path="bad\x00.txt", content="x"),
        FileOperation(action="CREATE", path="surrogate.txt", content="\ud800"),
        FileOperation(action="CREATE", path="c.txt", content="c"),
    ), str(tmp_path), host)

    assert (result.succeeded, result.failed) == (2, 2)
    assert result.failed_paths == ["bad\x00.txt", "surrogate.txt"]
    assert (tmp_path / "a.txt").read_text() == "a"
    assert (tmp_path / "c.txt").read_text() == "c"


@pytest.mark.parametrize("path", ["", "/", "{project}", "/{project}/", "..", "../outside", "src/../../outside"])
def test_paths_outside_the_project_are_refused(host, tmp_path, path):
    root = tmp_path / "myapp"
    (root / "src").mkdir(parents=True)
    (root / "src" / "keep.txt").write_text("keep")
    (tmp_path / "outside").mkdir()

    result = apply_change_set(
        change_set(FileOperation(action="DELETE", path=path.format(project="myapp"))), str(root), host)

    assert (result.succeeded, result.failed) == (0, 1)
    assert (root / "src" / "keep.txt").exists()
    assert (tmp_path / "outside").exists()

def test_apply_does_not_mutate_the_change_set(host, tmp_path):
    cs = change_set(FileOperation(action="CREATE", path="a.txt", content="a"))
    before = cs.model_dump()

    apply_change_set(cs, str(tmp_path), host)

    assert cs.model_dump() == before


def test_format_apply_result():
    assert format_apply_result(ApplyResult(succeeded=3)) == \
        "### 🚀 Action Complete\nSuccessfully applied **3** changes."
    assert format_apply_result(ApplyResult(succeeded=1, failed=2)).endswith("⚠️ **2** operations failed.")


def test_review_accept(host, tmp_path):
    review = ChangeSetReview(host)
    proposed = review.propose(block('[{"action": "CREATE", "path": "a.txt", "content": "a"}]'))

    assert review.pending == proposed
    result = review.accept(str(tmp_path))

    assert result.succeeded == 1
    assert (tmp_path / "a.txt").read_text() == "a"
    assert review.pending is None
    assert review.accept(str(tmp_path)) is None


def test_review_reject_has_no_side_effects(host, tmp_path):
    review = ChangeSetReview(host)
    review.propose(block('[{"action": "CREATE", "path": "a.txt", "content": "a"}]'))

    rejected = review.reject()

    assert rejected is not None
    assert review.pending is None
    assert list(tmp_path.iterdir()) == []


def test_review_ignores_replies_without_changes(host):
    review = ChangeSetReview(host)
    review.propose(block('[{"action": "DELETE", "path": "a.txt"}]'))

    assert review.propose("no changes here") is None
    assert review.pending is not None
