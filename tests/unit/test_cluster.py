from svshard.cluster import EvidenceClusterProcessor
from svshard.config import ProcessingContext
from svshard.constants import ORIENT
from svshard.reference import ReferenceDictionary

from .mock import evidence


def cluster(records, **kwargs):
    processor = EvidenceClusterProcessor(**kwargs)
    for record in records:
        processor.add_evidence(record)
    return list(processor)


def pair(evidence_id, start, remote_start, reference_id=0, remote_reference_id=1):
    return evidence(
        evidence_id, reference_id, start, start + 100, orient=ORIENT.LEFT,
        remote_reference_id=remote_reference_id, remote_start=remote_start, remote_end=remote_start + 100,
        remote_orient=ORIENT.RIGHT,
    )


class TestEvidenceClusterProcessor:
    def test_pairs_and_splits(self):
        records = [
            pair('p1', 1000, 5000),
            pair('p2', 1050, 5020),
            pair('p3', 9000, 5000),
            evidence('s1', 0, 300, orient=ORIENT.RIGHT),
            # the mate of p1, seen from the other reference sequence
            evidence(
                'p1', 1, 5000, 5100, orient=ORIENT.RIGHT,
                remote_reference_id=0, remote_start=1000, remote_end=1100, remote_orient=ORIENT.LEFT,
            ),
        ]
        calls = cluster(records, cluster_radius=200, min_support=2)
        assert [c.key for c in calls] == [(0, 300), (0, 1000), (0, 9000)]
        assert [c.valid for c in calls] == [False, True, False]
        call = calls[1]
        assert (call.break1.start, call.break1.end, call.break1.orient) == (1000, 1150, ORIENT.LEFT)
        assert (call.break2.reference_id, call.break2.start, call.break2.end, call.break2.orient) == (1, 5000, 5120, ORIENT.RIGHT)
        assert calls[0].break2 is None

    def test_radius(self):
        calls = cluster([evidence('a', 0, 100), evidence('b', 0, 350)], cluster_radius=200, min_support=1)
        assert len(calls) == 2
        calls = cluster([evidence('a', 0, 100), evidence('b', 0, 300)], cluster_radius=200, min_support=1)
        assert len(calls) == 1

    def test_transitive_links(self):
        records = [evidence('a', 0, 100), evidence('b', 0, 250), evidence('c', 0, 400)]
        calls = cluster(records, cluster_radius=200, min_support=3)
        assert len(calls) == 1
        assert calls[0].valid
        assert (calls[0].break1.start, calls[0].break1.end) == (100, 400)

    def test_orientation_separates(self):
        records = [evidence('a', 0, 100, orient=ORIENT.LEFT), evidence('b', 0, 100, orient=ORIENT.RIGHT)]
        assert len(cluster(records, cluster_radius=200, min_support=1)) == 2

    def test_remote_distance_separates(self):
        records = [pair('a', 1000, 5000), pair('b', 1000, 9000)]
        assert len(cluster(records, cluster_radius=200, min_support=1)) == 2

    def test_deterministic_ids(self):
        records = [pair('a', 1000, 5000), pair('b', 1010, 5010), evidence('c', 0, 50)]
        first = cluster(records)
        second = cluster(list(reversed(records)))
        assert [c.variant_id for c in first] == [c.variant_id for c in second]
        assert len({c.variant_id for c in first}) == 2

    def test_no_evidence(self):
        assert cluster([]) == []

    def test_from_context(self, tmp_path):
        reference = ReferenceDictionary(['chr1', 'chr2'])
        context = ProcessingContext(reference, str(tmp_path), cluster_radius=10, min_support=4)
        processor = EvidenceClusterProcessor.from_context(context)
        assert processor.cluster_radius == 10
        assert processor.min_support == 4
        processor.add_evidence(pair('a', 100, 200))
        call = list(processor)[0]
        assert call.break1.chr == 'chr1'
        assert call.break2.chr == 'chr2'
