"""
Unit tests for the positional line diff and set comparison

Tests cover:
- Positional (index-aligned) line annotation, including index shift behaviour
- Set comparison statuses and iteration order
- Two-column text comparison
- Item-level change flags for the version compare view
"""

from khw_console.schemas.compare import (
    ChangeFlag,
    ItemStatus,
    LineStatus,
    ManualGuidelineItem,
)
from khw_console.services.diff_engine import (
    compare_lines,
    compare_sets,
    compare_texts,
    guideline_flag,
    keyword_flag,
)


def _statuses(lines):
    return [line.status for line in lines]


# ============================================================================
# Test: compare_lines
# ============================================================================


def test_compare_lines_inserted_line_shifts_following_lines():
    left = ["x", "y"]
    right = ["x", "z", "y"]

    assert _statuses(compare_lines(left, right)) == [LineStatus.SAME, LineStatus.DIFFERENT]
    assert _statuses(compare_lines(right, left)) == [
        LineStatus.SAME,
        LineStatus.DIFFERENT,
        LineStatus.DIFFERENT,
    ]


def test_compare_lines_ignores_surrounding_whitespace():
    result = compare_lines(["  같은 줄 "], ["같은 줄"])

    assert _statuses(result) == [LineStatus.SAME]
    assert result[0].text == "같은 줄"


def test_compare_lines_identical_sequences_are_same():
    lines = ["a", "b", "c"]

    assert _statuses(compare_lines(lines, list(lines))) == [LineStatus.SAME] * 3


def test_compare_lines_empty_inputs():
    assert compare_lines([], ["a"]) == []
    assert compare_lines(None, None) == []
    assert _statuses(compare_lines(["a"], None)) == [LineStatus.DIFFERENT]


# ============================================================================
# Test: compare_sets
# ============================================================================


def test_compare_sets_statuses():
    assert compare_sets(["a", "b"], ["b", "c"]) == {
        "a": ItemStatus.REMOVED,
        "b": ItemStatus.UNCHANGED,
        "c": ItemStatus.ADDED,
    }


def test_compare_sets_iterates_new_order_then_removed():
    result = compare_sets(["old-only", "shared"], ["new2", "shared", "new1"])

    assert list(result) == ["new2", "shared", "new1", "old-only"]


def test_compare_sets_uses_trimmed_values():
    result = compare_sets([" 로그인 ", "", "  "], ["로그인"])

    assert result == {"로그인": ItemStatus.UNCHANGED}


def test_compare_sets_order_does_not_affect_status():
    forward = compare_sets(["a", "b", "c"], ["c", "b", "a"])

    assert set(forward.values()) == {ItemStatus.UNCHANGED}


def test_compare_sets_empty_inputs():
    assert compare_sets(None, None) == {}
    assert compare_sets([], ["a"]) == {"a": ItemStatus.ADDED}


# ============================================================================
# Test: compare_texts
# ============================================================================


def test_compare_texts_annotates_both_sides():
    existing = "고객 본인 확인\n\n비밀번호 재설정 안내\n"
    current = "고객 본인 확인\n OTP 재발급 안내\n지점 방문 안내"

    result = compare_texts(existing, current)

    assert [line.text for line in result.left] == ["고객 본인 확인", "비밀번호 재설정 안내"]
    assert _statuses(result.left) == [LineStatus.SAME, LineStatus.DIFFERENT]
    assert _statuses(result.right) == [
        LineStatus.SAME,
        LineStatus.DIFFERENT,
        LineStatus.DIFFERENT,
    ]
    assert result.has_differences


def test_compare_texts_blank_side():
    result = compare_texts("", "입력 내용")

    assert result.left == []
    assert _statuses(result.right) == [LineStatus.DIFFERENT]


# ============================================================================
# Test: item-level change flags
# ============================================================================


def test_keyword_flag_by_side():
    old = ["로그인", "오류"]
    new = ["로그인", "OTP"]

    assert keyword_flag("오류", "old", old, new) == ChangeFlag.REMOVED
    assert keyword_flag("로그인", "old", old, new) == ChangeFlag.NONE
    assert keyword_flag("OTP", "new", old, new) == ChangeFlag.ADDED
    assert keyword_flag("로그인", "new", old, new) == ChangeFlag.NONE


def test_guideline_flag_matches_by_title():
    old = [
        ManualGuidelineItem(title="본인 확인", description="신분증 확인"),
        ManualGuidelineItem(title="구 절차", description="폐지됨"),
    ]
    new = [
        ManualGuidelineItem(title="본인 확인", description="신분증 및 OTP 확인"),
        ManualGuidelineItem(title="신규 절차", description="앱 재설치"),
    ]

    assert guideline_flag(old[0], "old", old, new) == ChangeFlag.MODIFIED
    assert guideline_flag(old[1], "old", old, new) == ChangeFlag.REMOVED
    assert guideline_flag(new[0], "new", old, new) == ChangeFlag.MODIFIED
    assert guideline_flag(new[1], "new", old, new) == ChangeFlag.ADDED


def test_guideline_flag_unchanged():
    item = ManualGuidelineItem(title="본인 확인", description="신분증 확인")

    assert guideline_flag(item, "new", [item], [item]) == ChangeFlag.NONE
