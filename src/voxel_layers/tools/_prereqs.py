"""Prerequisite checking helpers for MCP tools."""


def require_state(state, *, items: bool = False) -> None:
    """Raise ValueError with a descriptive message if required state is not set.

    Usage in a tool:
        try:
            require_state(state, items=True)
        except ValueError as e:
            return f"Error: {e}"
    """
    if items and not state.items:
        raise ValueError(
            "Add voxels first with add_voxels or import_kasane_json."
        )


def require_item(state, item_id: int):
    """Return the item with ``item_id`` or raise ValueError."""
    item = state.find_item(item_id)
    if item is None:
        known = ", ".join(str(i.id) for i in state.items) or "none"
        raise ValueError(f"No voxel item with id {item_id} (known ids: {known}).")
    return item
