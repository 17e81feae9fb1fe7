"""
Group-versions: the API groups' versions as they are served by the cluster.

A group-version is a string like ``apps/v1`` or ``batch/v1beta1``,
or a bare version ``v1`` for the core ("legacy") group, which has no name.
The comparison and the lookups are case-insensitive.
"""
from typing import NewType, Tuple

# As seen in the catalogs and in the manifests' ``apiVersion`` field: "apps/v1", "v1".
GroupVersion = NewType('GroupVersion', str)

# A normalised group-version for case-insensitive keys in the registries.
GroupVersionKey = NewType('GroupVersionKey', str)


def key(group_version: str) -> GroupVersionKey:
    return GroupVersionKey(group_version.strip().lower())


def split(group_version: str) -> Tuple[str, str]:
    """
    Split a group-version into the group and the version parts.

    The core group is an empty string: ``"v1"`` -> ``("", "v1")``.
    """
    group, _, version = group_version.strip().rpartition('/')
    return group, version
