import unittest
from datetime import date, datetime, timedelta, timezone

from vc_changelog.parsing.models import RawCommit
from vc_changelog.pipeline.releases import split_releases


BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def history():
    # c5 is the newest commit, c1 the oldest.
    return [
        RawCommit(hash=f"c{n}", author="Dev", date=BASE + timedelta(days=n), parent_count=1, message=f"fix: {n}")
        for n in range(5, 0, -1)
    ]


def labels(releases):
    return [(r.label, [c.hash for c in r.commits]) for r in releases]


class TestSplitReleases(unittest.TestCase):
    def setUp(self) -> None:
        self.commits = history()
        self.tags = {"c3": ["v1.1"], "c1": ["v1.0"]}

    def test_unreleased_and_latest_release(self) -> None:
        releases = split_releases(self.commits, self.tags)
        self.assertEqual(labels(releases), [(None, ["c5", "c4"]), ("v1.1", ["c3", "c2"])])
        self.assertTrue(releases[0].unreleased)
        self.assertIsNone(releases[0].date)
        self.assertEqual(releases[1].date, date(2024, 5, 4))

    def test_all_tags(self) -> None:
        releases = split_releases(self.commits, self.tags, all_tags=True)
        self.assertEqual(
            labels(releases),
            [(None, ["c5", "c4"]), ("v1.1", ["c3", "c2"]), ("v1.0", ["c1"])],
        )

    def test_max_tags(self) -> None:
        releases = split_releases(self.commits, self.tags, max_tags=2)
        self.assertEqual([r.label for r in releases], [None, "v1.1", "v1.0"])

    def test_skip_unreleased(self) -> None:
        releases = split_releases(self.commits, self.tags, all_tags=True, skip_unreleased=True)
        self.assertEqual([r.label for r in releases], ["v1.1", "v1.0"])

    def test_skip_pattern_ignores_release_candidates(self) -> None:
        tags = {"c4": ["v1.2-rc1"], "c3": ["v1.1"]}
        releases = split_releases(self.commits, tags, all_tags=True)
        self.assertEqual(labels(releases), [(None, ["c5", "c4"]), ("v1.1", ["c3", "c2", "c1"])])

    def test_empty_skip_pattern_keeps_every_tag(self) -> None:
        tags = {"c4": ["v1.2-rc1"]}
        releases = split_releases(self.commits, tags, tag_skip_pattern="", all_tags=True)
        self.assertEqual([r.label for r in releases], [None, "v1.2-rc1"])

    def test_tagged_head(self) -> None:
        tags = {"c5": ["v2.0"], "c2": ["v1.0"]}
        releases = split_releases(self.commits, tags)
        self.assertEqual(labels(releases), [("v2.0", ["c5", "c4", "c3"])])

    def test_no_tags(self) -> None:
        self.assertEqual(labels(split_releases(self.commits, {})), [(None, ["c5", "c4", "c3", "c2", "c1"])])

    def test_no_commits(self) -> None:
        self.assertEqual(split_releases([], self.tags), [])


if __name__ == "__main__":
    unittest.main()
