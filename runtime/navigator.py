from __future__ import annotations

import os

from models.listing import NavigationRequest, Operation


def join_path(*parts: str) -> str:
    """Concatenate the non-empty parts and clean the result.

    Unlike ``os.path.join`` an absolute later part does not discard the ones
    before it, so ``join_path("/a", "/c")`` is ``/a/c``. ``..`` segments are
    collapsed lexically; ``join_path("/", "..")`` stays ``/``.
    """
    kept = [p for p in parts if p]
    if not kept:
        return "."
    head, *rest = kept
    for part in rest:
        head = head.rstrip(os.sep) + os.sep + part.lstrip(os.sep)
    return os.path.normpath(head)


def resolve(request: NavigationRequest, default_root: str = "") -> str:
    """Return the concrete path a navigation request points at.

    No access rules are applied here.
    """
    base = request.base_path or default_root or os.getcwd()
    if request.operation is Operation.ENTER:
        return join_path(base, request.folder_name or "")
    if request.operation is Operation.UP:
        return join_path(base, os.pardir)
    return base
