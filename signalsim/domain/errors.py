class SignalConflictError(RuntimeError):
    """Both axes hold right of way after the per-tick repair ran.

    Raised only when a controller issued transitions that the signal
    guard and the green fallback could not reconcile.
    """
