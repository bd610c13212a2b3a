from svshard.annotate import AnnotationPipeline, BreakendAnnotator, CoverageAnnotator, EvidenceAnnotator
from svshard.cluster import EvidenceClusterProcessor
from svshard.constants import ANNOTATION, ORIENT, SAMPLE
from svshard.evidence import oriented_key
import pytest

from .mock import MockLookup, evidence, variant


class TestCoverageAnnotator:
    def test_adds_depths(self):
        normal = MockLookup(4)
        tumour = MockLookup(9)
        result = CoverageAnnotator(normal, tumour).annotate(variant(0, 100, 1, 500))
        assert result.data == {ANNOTATION.REF_NORMAL: 4, ANNOTATION.REF_TUMOUR: 9}
        assert normal.queries == [(0, 100)]
        assert tumour.queries == [(0, 100)]

    def test_missing_lookup(self):
        result = CoverageAnnotator(normal_lookup=MockLookup(1)).annotate(variant(0, 100))
        assert result.data == {ANNOTATION.REF_NORMAL: 1}


class TestEvidenceAnnotator:
    def test_counts_distinct_evidence(self):
        stream = [
            evidence('a', 0, 95, 105, orient=ORIENT.LEFT, remote_reference_id=1, remote_start=500, remote_orient=ORIENT.RIGHT),
            evidence('a', 0, 96, 106, orient=ORIENT.LEFT, remote_reference_id=1, remote_start=501, remote_orient=ORIENT.RIGHT),
            evidence('c', 0, 98, orient=ORIENT.RIGHT, sample=SAMPLE.TUMOUR),
            evidence('b', 0, 99, 101, orient=ORIENT.LEFT, sample=SAMPLE.TUMOUR),
            evidence('d', 0, 100, remote_reference_id=2, remote_start=500, remote_orient=ORIENT.RIGHT),
        ]
        annotator = EvidenceAnnotator(stream)
        result = annotator.annotate(variant(0, 100, 1, 500, orient1=ORIENT.LEFT, orient2=ORIENT.RIGHT))
        assert result.data == {ANNOTATION.SUPPORT: 2, ANNOTATION.SUPPORT_NORMAL: 1, ANNOTATION.SUPPORT_TUMOUR: 1}

    def test_sliding_window(self):
        stream = [
            evidence('a', 0, 10, 20),
            evidence('b', 0, 15, 300),
            evidence('c', 0, 250, 260),
            evidence('d', 1, 5, 10),
        ]
        annotator = EvidenceAnnotator(stream)
        assert annotator.annotate(variant(0, 18)).data[ANNOTATION.SUPPORT] == 2
        assert annotator.annotate(variant(0, 255)).data[ANNOTATION.SUPPORT] == 2
        assert [e.evidence_id for _, e in annotator.window] == ['b', 'c']
        assert annotator.annotate(variant(1, 7)).data[ANNOTATION.SUPPORT] == 1
        assert [e.evidence_id for _, e in annotator.window] == ['d']
        assert annotator.annotate(variant(2, 1)).data[ANNOTATION.SUPPORT] == 0

    def test_no_evidence(self):
        result = EvidenceAnnotator([]).annotate(variant(0, 1))
        assert result.data[ANNOTATION.SUPPORT] == 0

    def test_upper_mate_only(self):
        # only the mate on the higher reference sequence of each pair was extracted
        stream = [
            evidence(
                name, 1, 500 + offset, 600 + offset, orient=ORIENT.RIGHT, remote_reference_id=0,
                remote_start=100 + offset, remote_end=200 + offset, remote_orient=ORIENT.LEFT, sample=SAMPLE.TUMOUR,
            )
            for name, offset in [('a', 0), ('b', 10)]
        ]
        processor = EvidenceClusterProcessor(min_support=2)
        for record in stream:
            processor.add_evidence(record)
        calls = list(processor)
        assert len(calls) == 1
        assert calls[0].valid
        result = EvidenceAnnotator(sorted(stream, key=oriented_key)).annotate(calls[0])
        assert result.data == {ANNOTATION.SUPPORT: 2, ANNOTATION.SUPPORT_NORMAL: 0, ANNOTATION.SUPPORT_TUMOUR: 2}

    def test_mates_counted_once(self):
        lower = evidence(
            'a', 0, 100, 200, orient=ORIENT.LEFT, remote_reference_id=1, remote_start=500, remote_end=600,
            remote_orient=ORIENT.RIGHT,
        )
        upper = evidence(
            'a', 1, 500, 600, orient=ORIENT.RIGHT, remote_reference_id=0, remote_start=100, remote_end=200,
            remote_orient=ORIENT.LEFT,
        )
        annotator = EvidenceAnnotator(sorted([upper, lower], key=oriented_key))
        result = annotator.annotate(variant(0, 150, 1, 550, orient1=ORIENT.LEFT, orient2=ORIENT.RIGHT))
        assert result.data[ANNOTATION.SUPPORT] == 1
        assert len(annotator.window) == 2


class AddOne(BreakendAnnotator):
    def annotate(self, variant):
        return variant.annotate(COUNT=variant.data.get('COUNT', 0) + 1)


class TestAnnotationPipeline:
    def test_skips_invalid(self):
        records = [variant(0, 1, variant_id='a'), variant(0, 2, valid=False, variant_id='b'), variant(0, 3, variant_id='c')]
        seen = []

        def record(variant):
            seen.append(variant.variant_id)
            return variant

        result = list(AnnotationPipeline([record]).annotate(records))
        assert [r.variant_id for r in result] == ['a', 'c']
        assert seen == ['a', 'c']

    def test_stages_in_order(self):
        def double(variant):
            return variant.annotate(COUNT=variant.data['COUNT'] * 2)

        result = list(AnnotationPipeline([AddOne(), double, None, AddOne()]).annotate([variant(0, 1)]))
        assert result[0].data['COUNT'] == 3

    def test_input_not_modified(self):
        record = variant(0, 1)
        result = list(AnnotationPipeline([AddOne()]).annotate([record]))
        assert record.data == {}
        assert result[0].data == {'COUNT': 1}

    def test_base_is_abstract(self):
        with pytest.raises(NotImplementedError):
            BreakendAnnotator()(variant(0, 1))
