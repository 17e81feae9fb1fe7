"""
Pure data structures and data-manipulating functions of the resource model.

Kinds, group-versions, manifest fields: how they are spelled, canonicalized,
parsed, and read from either the raw documents or the typed objects.

All the functions are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
