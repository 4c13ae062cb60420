"""
Ordering helpers for interview steps.

Steps are always addressed by their stable ID, never by list position, so two
moves made from different views apply cleanly to whatever the current order is.
"""
from typing import Dict, Iterable, List, Sequence


class StepOrderError(ValueError):
    """Raised when a requested order does not match the application's steps."""


def reorder_steps(step_ids: Sequence[int], step_id: int, new_index: int) -> List[int]:
    """
    Move one step to a new position.

    Removes `step_id` from the current order and splices it back in at
    `new_index` (clamped to the list bounds).

    Returns:
        The new list of step IDs.

    Raises:
        StepOrderError: If `step_id` is not one of `step_ids`.
    """
    ordered = list(step_ids)
    if step_id not in ordered:
        raise StepOrderError(f"Step {step_id} does not belong to this application")

    ordered.remove(step_id)
    new_index = max(0, min(new_index, len(ordered)))
    ordered.insert(new_index, step_id)
    return ordered


def validate_order(current_ids: Iterable[int], requested_ids: Sequence[int]) -> None:
    """Check that `requested_ids` is a permutation of `current_ids`."""
    current = set(current_ids)
    requested = set(requested_ids)
    if len(requested) != len(requested_ids):
        raise StepOrderError("Step order contains duplicate IDs")
    if current != requested:
        missing = sorted(current - requested)
        unknown = sorted(requested - current)
        raise StepOrderError(f"Step order must list every step exactly once (missing={missing}, unknown={unknown})")


def renumber(step_ids: Sequence[int]) -> Dict[int, int]:
    """Map each step ID to its 1-based sequence number."""
    return {step_id: index for index, step_id in enumerate(step_ids, start=1)}
