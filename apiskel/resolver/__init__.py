"""Reference resolution — map requested module identities onto module files.

- identity: classify a bound module against the identity that requested it
- reference_resolver: probe the search path, bind each file name once
"""

from apiskel.resolver.identity import MatchResult, MismatchKind, MismatchNotice, match_identity
from apiskel.resolver.reference_resolver import ReferenceResolver, ResolutionResult

__all__ = [
    "MatchResult",
    "MismatchKind",
    "MismatchNotice",
    "ReferenceResolver",
    "ResolutionResult",
    "match_identity",
]
