"""
streaming annotation of the merged variant calls. Each stage receives the records in merge key order and
returns a new, annotated record
"""
from .constants import ANNOTATION, ORIENT
from .evidence import oriented_key
from .interval import Interval
from .util import DEVNULL


class BreakendAnnotator:
    """
    base class for an annotation stage. Any callable taking and returning a VariantRecord can also be used
    """

    def annotate(self, variant):
        raise NotImplementedError('abstract method')

    def __call__(self, variant):
        return self.annotate(variant)


class CoverageAnnotator(BreakendAnnotator):
    """
    adds the normal and tumour read depth at the first breakend
    """

    def __init__(self, normal_lookup=None, tumour_lookup=None):
        self.normal_lookup = normal_lookup
        self.tumour_lookup = tumour_lookup

    def annotate(self, variant):
        breakend = variant.break1
        data = {}
        if self.normal_lookup is not None:
            data[ANNOTATION.REF_NORMAL] = self.normal_lookup.reference_coverage(breakend.reference_id, breakend.start)
        if self.tumour_lookup is not None:
            data[ANNOTATION.REF_TUMOUR] = self.tumour_lookup.reference_coverage(breakend.reference_id, breakend.start)
        return variant.annotate(**data)


def _orient_compatible(first, second):
    return ORIENT.NS in [first, second] or first == second


def _matches(side, breakend):
    return side.reference_id == breakend.reference_id \
        and Interval.overlaps(side, breakend) \
        and _orient_compatible(side.orient, breakend.orient)


def _supports(evidence, variant):
    """
    check if a piece of evidence supports a variant. The sides of the evidence are ordered the same way the
    clusterer orders them: the lower side is matched against the first breakend and, for a pair of breakends,
    the upper side against the second. Sides starting at the same position may be in either order
    """
    lower, upper = evidence.sides()
    if variant.break2 is None or upper is None:
        return _matches(lower, variant.break1)
    if _matches(lower, variant.break1) and _matches(upper, variant.break2):
        return True
    return _matches(upper, variant.break1) and _matches(lower, variant.break2)


class EvidenceAnnotator(BreakendAnnotator):
    """
    counts the distinct evidence supporting each call. Consumes the evidence stream once, holding only the
    evidence which may still overlap a later call, so the variants must be in merge key order and the evidence
    in the order of its lower side (see :func:`~svshard.evidence.oriented_key`)
    """

    def __init__(self, evidence, log=DEVNULL):
        """
        Args:
            evidence (iterable of EvidenceRecord): the evidence of all sources ordered by the (reference index,
                start) of its lower side
        """
        self.evidence = iter(evidence)
        self.log = log
        self.window = []
        self._next = None
        self._exhausted = False

    def _peek(self):
        if self._next is None and not self._exhausted:
            self._next = next(self.evidence, None)
            if self._next is None:
                self._exhausted = True
        return self._next

    def _advance(self, reference_id, start, end):
        while True:
            evidence = self._peek()
            if evidence is None or oriented_key(evidence) > (reference_id, end):
                break
            self.window.append((evidence.sides()[0], evidence))
            self._next = None
        # evidence ending before the current start cannot overlap any later call
        self.window = [(lower, e) for lower, e in self.window if (lower.reference_id, lower.end) >= (reference_id, start)]

    def annotate(self, variant):
        breakend = variant.break1
        self._advance(breakend.reference_id, breakend.start, breakend.end)
        normal = set()
        tumour = set()
        for _, evidence in self.window:
            if _supports(evidence, variant):
                if evidence.is_tumour:
                    tumour.add(evidence.evidence_id)
                else:
                    normal.add(evidence.evidence_id)
        return variant.annotate(**{
            ANNOTATION.SUPPORT: len(normal | tumour),
            ANNOTATION.SUPPORT_NORMAL: len(normal),
            ANNOTATION.SUPPORT_TUMOUR: len(tumour),
        })


class AnnotationPipeline:
    """
    applies the annotation stages, in order, to every valid record of a stream. Invalid records are dropped
    """

    def __init__(self, annotators, log=DEVNULL):
        self.annotators = [a for a in annotators if a is not None]
        self.log = log

    def annotate(self, variants):
        """
        Args:
            variants (iterable of VariantRecord): records in merge key order

        Returns:
            generator of VariantRecord: the annotated valid records, in input order
        """
        skipped = 0
        for variant in variants:
            if not variant.valid:
                skipped += 1
                continue
            for annotator in self.annotators:
                variant = annotator(variant)
            yield variant
        self.log('skipped', skipped, 'invalid records')
