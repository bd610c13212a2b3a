"""
the default clustering of breakend evidence into variant calls
"""
import networkx as nx
from shortuuid import uuid

from .breakpoint import Breakend, VariantRecord, merge_key
from .interval import Interval
from .util import DEVNULL


class EvidenceClusterProcessor:
    """
    groups evidence which agrees on the reference sequences and orientations of its breakends and links any
    two pieces whose breakends lie within cluster_radius of one another. Each connected component becomes one
    call. Calls with fewer than min_support distinct evidence ids are kept but marked invalid
    """

    def __init__(self, cluster_radius=200, min_support=2, reference=None, log=DEVNULL):
        """
        Args:
            cluster_radius (int): the maximum distance between breakends for evidence to be linked
            min_support (int): the minimum number of distinct evidence ids for a valid call
            reference (ReferenceDictionary): used to name the breakends of the calls
            log (Log): the logger
        """
        self.cluster_radius = cluster_radius
        self.min_support = min_support
        self.reference = reference
        self.log = log
        self.evidence = []

    @classmethod
    def from_context(cls, context, log=None):
        return cls(
            cluster_radius=context.cluster_radius,
            min_support=context.min_support,
            reference=context.reference,
            log=log if log is not None else context.log,
        )

    def add_evidence(self, evidence):
        self.evidence.append(evidence)

    def _name(self, reference_id):
        if self.reference is None:
            return None
        return self.reference.name(reference_id)

    def _linked(self, first, second):
        if abs(Interval.dist(first[0], second[0])) > self.cluster_radius:
            return False
        if first[1] is None:
            return True
        return abs(Interval.dist(first[1], second[1])) <= self.cluster_radius

    def _cluster_group(self, members):
        """
        members are (sides, evidence) tuples which share reference sequences and orientations
        """
        members = sorted(members, key=lambda m: (m[0][0].start, m[0][0].end))
        graph = nx.Graph()
        graph.add_nodes_from(range(0, len(members)))
        for i, (sides, _) in enumerate(members):
            for j in range(i + 1, len(members)):
                if members[j][0][0].start - sides[0].end > self.cluster_radius:
                    break
                if self._linked(sides, members[j][0]):
                    graph.add_edge(i, j)
        for component in nx.connected_components(graph):
            yield [members[i] for i in sorted(component)]

    def _merge_side(self, side, component):
        span = Interval.union(*[sides[side] for sides, _ in component])
        first = component[0][0][side]
        return Breakend(first.reference_id, span.start, span.end, orient=first.orient, chr=self._name(first.reference_id))

    def _call(self, component):
        break1 = self._merge_side(0, component)
        break2 = None if component[0][0][1] is None else self._merge_side(1, component)
        evidence_ids = sorted({evidence.evidence_id for _, evidence in component})
        # identifiers are derived from the content so repeated runs give the same calls
        variant_id = 'cluster-{}'.format(uuid(name='{}|{}|{}'.format(break1.key, break2.key if break2 else None, ','.join(evidence_ids))))
        return VariantRecord(break1, break2, valid=len(evidence_ids) >= self.min_support, variant_id=variant_id)

    def __iter__(self):
        groups = {}
        for evidence in self.evidence:
            # both mates of a pair give the same sides so they land in the same group
            first, second = evidence.sides()
            group_key = (
                first.reference_id,
                first.orient,
                None if second is None else second.reference_id,
                None if second is None else second.orient,
            )
            groups.setdefault(group_key, []).append(((first, second), evidence))
        calls = []
        for members in groups.values():
            for component in self._cluster_group(members):
                calls.append(self._call(component))
        calls.sort(key=merge_key)
        self.log('clustered', len(self.evidence), 'evidence into', len(calls), 'calls',
                 '({} valid)'.format(len([c for c in calls if c.valid])))
        return iter(calls)
