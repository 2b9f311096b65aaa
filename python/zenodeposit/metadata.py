"""
Support for describing a record to be deposited into Zenodo.

A :py:class:`RecordDraft` holds the descriptive fields supplied by the caller along with the
identifiers Zenodo assigns as the deposition proceeds.  A :py:class:`MetadataBuilder` converts
a draft into the metadata document that is sent to Zenodo's deposition API.
"""
import re
from collections.abc import Mapping
from copy import deepcopy
from typing import List, Tuple

DEFAULT_DESCRIPTION = "No description."
VISIBILITIES = ("open", "restricted", "closed")

# the resource types for which Zenodo recognizes a subtype, mapped to the metadata
# property that carries it
SUBTYPE_PROPS = {
    "publication": "publication_type",
    "image":       "image_type"
}

_doi_num_re = re.compile(r'(\d{6,})$')
_date_re = re.compile(r'^\d{4}(-\d{2}(-\d{2})?)?$')

def normalize_author(name: str) -> str:
    """
    put an author's name into "Last, First" form.  A name that already contains a comma is
    assumed to be in this form and is returned unchanged.  Otherwise, a name containing spaces
    is split at its last space, and the final token is moved to the front (so that
    "Jane Q. Doe" becomes "Doe, Jane Q.").  Any other name is returned unchanged.  Surrounding
    whitespace is removed and runs of internal whitespace are collapsed to a single space.
    """
    name = ' '.join(name.split())
    if ',' in name:
        return name
    if ' ' in name:
        first, last = name.rsplit(' ', 1)
        return f"{last}, {first}"
    return name

def split_resource_type(rtype: str) -> Tuple[str, str]:
    """
    split a resource type of the form "type/subtype" into its parts.  The split occurs at the
    first slash, and both parts are trimmed of surrounding whitespace.

    :return:  a 2-tuple of the type and the subtype; the subtype is None if ``rtype`` contains
              no slash or the part following the slash is empty.
    """
    if '/' not in rtype:
        return (rtype, None)
    main, sub = [p.strip() for p in rtype.split('/', 1)]
    return (main, sub or None)

def extract_doi_number(doi: str) -> str:
    """
    return the numeric record number that terminates a Zenodo DOI (e.g. "123456" from
    "10.5281/zenodo.123456"), or None if the DOI does not end in (at least) six digits.
    """
    if not doi:
        return None
    m = _doi_num_re.search(doi)
    return m.group(1) if m else None

class RecordDraft:
    """
    the description of a record being deposited into Zenodo.

    The descriptive fields are all optional; an unset field has the value None and will be left
    out of the metadata sent to Zenodo.  A few fields are normalized as they are set:

    ``author``
        is put into "Last, First" form (see :py:func:`normalize_author`)
    ``resource_type``
        is lower-cased.  It may have the form "type/subtype" (e.g. "publication/book"); the
        subtype is separated out the first time the metadata is built.
    ``tags``
        duplicate values are dropped

    The identity properties, ``deposition_id`` and ``doi``, are set by the
    :py:class:`~zenodeposit.workflow.DepositionWorkflow` as Zenodo assigns them; ``doi_number``
    is always derived from ``doi``.
    """

    FIELDS = ("title", "description", "author", "organization", "contributors", "tags",
              "resource_type", "dateinterval", "visibility", "communities", "license")

    def __init__(self, **fields):
        """
        initialize the draft, optionally setting its descriptive fields.
        :param fields:  initial values for any of the fields named in ``FIELDS``
        :raises TypeError:  if a given keyword is not a recognized field name
        """
        self.deposition_id = None
        self.doi = None

        self.title = None
        self.description = None
        self.organization = None
        self.dateinterval = None
        self.visibility = None
        self.license = None
        self._author = None
        self._contributors = None
        self._tags = None
        self._communities = None
        self._resource_type = None
        self._resource_subtype = None

        self.update(fields)

    def update(self, fields: Mapping):
        """
        set the descriptive fields given in a dictionary
        :raises TypeError:  if a key in ``fields`` is not a recognized field name
        """
        for name, val in fields.items():
            if name not in self.FIELDS:
                raise TypeError("RecordDraft: unrecognized field name: "+name)
            setattr(self, name, val)

    @property
    def doi_number(self) -> str:
        """
        the numeric suffix of the assigned DOI, or None if no DOI has been assigned or it does not
        end in a number
        """
        return extract_doi_number(self.doi)

    @property
    def author(self) -> str:
        return self._author

    @author.setter
    def author(self, name: str):
        self._author = normalize_author(name) if name is not None else None

    @property
    def contributors(self) -> List[Mapping]:
        """
        the list of contributors, each a dictionary with ``name`` and ``type`` properties (and
        optionally, ``affiliation`` and ``orcid``).
        """
        return self._contributors

    @contributors.setter
    def contributors(self, contribs: List[Mapping]):
        self._contributors = [dict(c) for c in contribs] if contribs is not None else None

    @property
    def tags(self) -> List[str]:
        return self._tags

    @tags.setter
    def tags(self, tags: List[str]):
        if tags is None:
            self._tags = None
            return
        if isinstance(tags, str):
            tags = [tags]
        self._tags = []
        for tag in tags:
            if tag not in self._tags:
                self._tags.append(tag)

    @property
    def communities(self) -> List[Mapping]:
        """
        the list of communities the record should be submitted to, each a dictionary with an
        ``identifier`` property
        """
        return self._communities

    @communities.setter
    def communities(self, comms: List[Mapping]):
        self._communities = [dict(c) for c in comms] if comms is not None else None

    @property
    def resource_type(self) -> str:
        return self._resource_type

    @resource_type.setter
    def resource_type(self, rtype: str):
        self._resource_type = rtype.lower() if rtype is not None else None
        self._resource_subtype = None

    @property
    def resource_subtype(self) -> str:
        """
        the subtype split out of the resource type.  This is only set for the "publication" and
        "image" types, and only after the resource type has been split by the MetadataBuilder.
        """
        return self._resource_subtype

    def split_resource_type(self):
        """
        separate a "type/subtype" resource type into its parts, leaving the short type in
        ``resource_type`` and the subtype in ``resource_subtype``.  A subtype given with a type
        other than "publication" or "image" is discarded.  Calling this on an already-split
        resource type has no effect.
        """
        if not self._resource_type or '/' not in self._resource_type:
            return
        main, sub = split_resource_type(self._resource_type)
        self._resource_type = main
        self._resource_subtype = sub if main in SUBTYPE_PROPS else None

class MetadataBuilder:
    """
    a factory for the Zenodo metadata document describing a :py:class:`RecordDraft`.

    The document is built fresh from the draft on each call to :py:meth:`build`, so it always
    reflects the current state of the draft's fields.
    """

    def __init__(self, draft: RecordDraft):
        self.draft = draft

    def build(self) -> Mapping:
        """
        return the Zenodo metadata document for the draft.  Only the ``creators`` property is
        always present; ``description`` defaults to "No description."; every other property
        appears only if its corresponding field in the draft is set.
        """
        d = self.draft
        d.split_resource_type()

        subtypes = dict((p, None) for p in SUBTYPE_PROPS.values())
        if d.resource_subtype and d.resource_type in SUBTYPE_PROPS:
            subtypes[SUBTYPE_PROPS[d.resource_type]] = d.resource_subtype

        md = [
            ("title",            d.title),
            ("description",      d.description if d.description is not None else DEFAULT_DESCRIPTION),
            ("creators",         [{"name": d.author or '', "affiliation": d.organization or ''}]),
            ("contributors",     d.contributors),
            ("keywords",         d.tags),
            ("upload_type",      d.resource_type),
            ("publication_type", subtypes["publication_type"]),
            ("image_type",       subtypes["image_type"]),
            ("publication_date", d.dateinterval),
            ("access_right",     d.visibility),
            ("communities",      d.communities),
            ("license",          d.license)
        ]
        return dict((k, deepcopy(v)) for k, v in md if v is not None)

def validate_draft(draft: RecordDraft) -> List[str]:
    """
    check the descriptive fields of a draft for values that Zenodo is sure to reject.

    :return:  a list of explanations of the problems found; an empty list means no problems
              were detected.
    """
    errs = []

    if draft.visibility is not None and draft.visibility not in VISIBILITIES:
        errs.append("visibility: not one of %s: %s" % (", ".join(VISIBILITIES), draft.visibility))

    if draft.dateinterval is not None:
        dates = draft.dateinterval.split('/')
        if len(dates) > 2 or not all(_date_re.match(dt.strip()) for dt in dates):
            errs.append("dateinterval: not of form YYYY[-MM[-DD]]/YYYY[-MM[-DD]]: " + draft.dateinterval)

    for i, contrib in enumerate(draft.contributors or []):
        if not contrib.get('name'):
            errs.append(f"contributors[{i}]: missing name")

    for i, comm in enumerate(draft.communities or []):
        if not comm.get('identifier'):
            errs.append(f"communities[{i}]: missing identifier")

    return errs
