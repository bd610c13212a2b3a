from unittest import mock

import pytest
from svshard.bam import breakpoint_pos, filter_reads, is_discordant, read_is_filtered, soft_clipped_length
from svshard.constants import CIGAR, ORIENT


def mock_read(**kwargs):
    attrs = dict(
        is_unmapped=False,
        is_secondary=False,
        is_supplementary=False,
        is_duplicate=False,
        is_qcfail=False,
        mapping_quality=60,
        reference_start=100,
        reference_end=200,
    )
    attrs.update(kwargs)
    return mock.Mock(**attrs)


class TestReadFilters:
    def test_keep(self):
        assert not read_is_filtered(mock_read())

    @pytest.mark.parametrize('flag', ['is_unmapped', 'is_secondary', 'is_supplementary', 'is_duplicate', 'is_qcfail'])
    def test_flags(self, flag):
        assert read_is_filtered(mock_read(**{flag: True}))

    def test_mapping_quality(self):
        assert read_is_filtered(mock_read(mapping_quality=10), min_mapping_quality=20)
        assert not read_is_filtered(mock_read(mapping_quality=20), min_mapping_quality=20)

    def test_zero_length(self):
        assert read_is_filtered(mock_read(reference_end=100))

    def test_filter_reads(self):
        reads = [mock_read(), mock_read(is_duplicate=True), mock_read(mapping_quality=0)]
        assert list(filter_reads(reads, min_mapping_quality=1)) == reads[:1]


class TestSoftClipping:
    def test_soft_clipped_length(self):
        assert soft_clipped_length(mock.Mock(cigartuples=[(CIGAR.S, 5), (CIGAR.M, 50), (CIGAR.S, 10)])) == 10
        assert soft_clipped_length(mock.Mock(cigartuples=[(CIGAR.M, 50)])) == 0
        assert soft_clipped_length(mock.Mock(cigartuples=None)) == 0

    def test_breakpoint_pos_right_clipped(self):
        read = mock.Mock(cigartuples=[(CIGAR.M, 50), (CIGAR.S, 10)], reference_start=100, reference_end=150)
        assert breakpoint_pos(read) == (ORIENT.LEFT, 149)

    def test_breakpoint_pos_left_clipped(self):
        read = mock.Mock(cigartuples=[(CIGAR.S, 10), (CIGAR.M, 50)], reference_start=100, reference_end=150)
        assert breakpoint_pos(read) == (ORIENT.RIGHT, 100)

    def test_breakpoint_pos_no_clipping(self):
        read = mock.Mock(cigartuples=[(CIGAR.M, 50)], cigarstring='50M')
        with pytest.raises(AttributeError):
            breakpoint_pos(read)


class TestIsDiscordant:
    def pair(self, **kwargs):
        attrs = dict(
            is_paired=True,
            mate_is_unmapped=False,
            is_unmapped=False,
            reference_id=0,
            next_reference_id=0,
            template_length=300,
            is_reverse=False,
            mate_is_reverse=True,
            reference_start=100,
            next_reference_start=250,
        )
        attrs.update(kwargs)
        return mock.Mock(**attrs)

    def test_concordant(self):
        assert not is_discordant(self.pair(), 1000)

    def test_unpaired(self):
        assert not is_discordant(self.pair(is_paired=False), 1000)

    def test_interchromosomal(self):
        assert is_discordant(self.pair(next_reference_id=1), 1000)

    def test_large_fragment(self):
        assert is_discordant(self.pair(template_length=5000), 1000)

    def test_same_strand(self):
        assert is_discordant(self.pair(mate_is_reverse=False), 1000)

    def test_facing_away(self):
        assert is_discordant(self.pair(is_reverse=True, mate_is_reverse=False), 1000)
