"""
Bounded undo/redo history of skeleton snapshots.
"""

from collections import deque

from ..skeleton.snapshot import capture, restore


class UndoRedoSystem:
    """
    Two-stack history of bone snapshots for one skeleton.

    Call `store_current_state()` once *before* a mutation starts. History past
    `max_history` entries drops the oldest entry silently.

    Example:
        history = UndoRedoSystem(max_history=50, on_state_changed=print)
        history.set_skeleton(skeleton)

        history.store_current_state()
        skeleton.bones[3].position[0] += 0.1
        skeleton.update_world_matrices()

        history.undo()   # -> True, bone 3 restored
        history.redo()   # -> True, edit re-applied
    """

    def __init__(self, max_history=50, on_state_changed=None):
        """
        Args:
            max_history: maximum entries kept on each stack
            on_state_changed: optional callback(can_undo, can_redo) fired
                after every history change
        """
        if max_history < 1:
            raise ValueError(f"max_history must be at least 1, got {max_history}")
        self.max_history = max_history
        self.on_state_changed = on_state_changed
        self.skeleton = None
        self.undo_stack = deque(maxlen=max_history)
        self.redo_stack = deque(maxlen=max_history)

    def set_skeleton(self, skeleton):
        self.skeleton = skeleton

    @property
    def undo_count(self):
        return len(self.undo_stack)

    @property
    def redo_count(self):
        return len(self.redo_stack)

    def can_undo(self):
        return len(self.undo_stack) > 0

    def can_redo(self):
        return len(self.redo_stack) > 0

    def store_current_state(self):
        """Push the current bone transforms and invalidate the redo path."""
        if self.skeleton is None:
            print("[UndoRedo] No skeleton set, cannot store state")
            return
        self.undo_stack.append(capture(self.skeleton))
        self.redo_stack.clear()
        self.notify_state_changed()

    def undo(self):
        """
        Restore the most recent stored state.

        Returns:
            False when there is nothing to undo, True otherwise
        """
        if self.skeleton is None or not self.undo_stack:
            return False
        self.redo_stack.append(capture(self.skeleton))
        restore(self.skeleton, self.undo_stack.pop())
        self.notify_state_changed()
        return True

    def redo(self):
        """
        Re-apply the most recently undone state.

        Returns:
            False when there is nothing to redo, True otherwise
        """
        if self.skeleton is None or not self.redo_stack:
            return False
        self.undo_stack.append(capture(self.skeleton))
        restore(self.skeleton, self.redo_stack.pop())
        self.notify_state_changed()
        return True

    def clear_history(self):
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.notify_state_changed()

    def notify_state_changed(self):
        if self.on_state_changed is not None:
            self.on_state_changed(self.can_undo(), self.can_redo())
