"""Declaration syntax — the trees apiskel drafts, lays out and canonicalizes.

- nodes: tokens, trivia, node kinds and the type-name parser
- synthesizer: draft a verbose declaration tree from a type symbol
- format: normalize whitespace into one multi-line layout
- rewriter: reduce a draft tree to the canonical skeleton form
"""
