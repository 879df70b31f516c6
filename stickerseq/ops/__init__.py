"""Operations modules - domain logic on the sticker collection.

Each module contains pure functions (or, for gestures, a small controller)
that operate on CanvasState. App.py wires these to UI signals and handles
any UI-owned state cleanup.
"""
