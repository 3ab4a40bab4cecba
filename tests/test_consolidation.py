"""
Tests for consolidating dependency update lines.
"""

from utils.consolidation import consolidate_updates


def _line_for(lines, package):
    return next(line for line in lines if f"`{package}`" in line)


def test_chains_newest_first():
    res = consolidate_updates([
        "- Updates `lib` from 1.2.4 to 1.3.0",
        "- Updates `lib` from 1.2.3 to 1.2.4",
        "- Updates `other` from 1.0 to 1.1",
    ])

    assert sorted(res) == [
        "- Updates `lib` from 1.2.3 to 1.3.0",
        "- Updates `other` from 1.0 to 1.1",
    ]


def test_chains_oldest_first():
    res = consolidate_updates([
        "- Updates `lib` from 1.2.3 to 1.2.4",
        "- Updates `lib` from 1.2.4 to 1.3.0",
    ])

    assert res == ["- Updates `lib` from 1.2.3 to 1.3.0"]


def test_chains_across_formats():
    res = consolidate_updates([
        "- Updates `lib` from 1.2.4 to 1.3.0",
        "- Bumps [lib](https://github.com/lib/lib) from 1.2.3 to 1.2.4",
    ])

    assert res == ["- Updates `lib` from 1.2.3 to 1.3.0"]


def test_pr_numbers_merged_descending():
    res = consolidate_updates([
        "- Updates `lib` from 1.0 to 1.1 (#100)",
        "- Updates `lib` from 1.1 to 1.2 (#200)",
        "- Updates `lib` from 1.2 to 1.3 (#300)",
    ])

    assert res == ["- Updates `lib` from 1.0 to 1.3  (#300, #200, #100)"]


def test_pr_numbers_deduplicated():
    res = consolidate_updates([
        "- Updates `lib` from 1.0 to 1.1 (#100)",
        "- Updates `lib` from 1.1 to 1.2 (#100)",
        "- Updates `lib` from 1.2 to 1.3 (#200)",
    ])

    lib_line = _line_for(res, "lib")
    assert lib_line.count("#100") == 1
    assert lib_line.endswith("(#200, #100)")


def test_pr_numbers_kept_per_package():
    res = consolidate_updates([
        "- Updates `lib` from 1.2.4 to 1.3.0 (#2887)",
        "- Updates `lib` from 1.2.3 to 1.2.4 (#2886)",
        "- Updates `other` from 1.0 to 1.1 (#2885)",
    ])

    assert _line_for(res, "lib") == "- Updates `lib` from 1.2.3 to 1.3.0  (#2887, #2886)"
    assert _line_for(res, "other") == "- Updates `other` from 1.0 to 1.1  (#2885)"


def test_no_suffix_without_pr_numbers():
    res = consolidate_updates([
        "- Updates `lib` from 1.0 to 1.1",
        "- Updates `lib` from 1.1 to 1.2",
    ])

    assert res == ["- Updates `lib` from 1.0 to 1.2"]


def test_disjoint_range_keeps_first_versions_but_records_pr():
    # Known lossy path: a non-adjacent range only contributes its PR number
    res = consolidate_updates([
        "- Updates `lib` from 1.0 to 1.1 (#1)",
        "- Updates `lib` from 2.0 to 2.1 (#2)",
    ])

    assert res == ["- Updates `lib` from 1.0 to 1.1  (#2, #1)"]


def test_unparsed_lines_pass_through_after_packages():
    res = consolidate_updates([
        "- Bump the maven group with 3 updates",
        "- Updates `lib` from 1.0 to 1.1",
        "- Bump the maven group with 3 updates",
    ])

    assert res == [
        "- Updates `lib` from 1.0 to 1.1",
        "- Bump the maven group with 3 updates",
        "- Bump the maven group with 3 updates",
    ]


def test_each_call_starts_fresh():
    consolidate_updates(["- Updates `lib` from 1.0 to 1.1"])

    assert consolidate_updates(["- Updates `lib` from 3.0 to 3.1"]) == ["- Updates `lib` from 3.0 to 3.1"]
