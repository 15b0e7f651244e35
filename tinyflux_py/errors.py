"""Custom error types for tinyflux-py."""


class TinyFluxError(Exception):
    """Base error for all tinyflux errors."""
    pass


class ConfigurationError(TinyFluxError, ValueError):
    """Raised when a reducer, selector or effect is registered with bad arguments."""
    pass


class ActionContractError(TinyFluxError, TypeError):
    """Raised when something that is not an action reaches dispatch()."""

    def __init__(self, value: object, reason: str = "missing a string 'type'"):
        self.value = value
        super().__init__(f"Cannot dispatch {value!r}: {reason}")


class TransitionError(TinyFluxError):
    """Raised when a reducer or selector fails while processing state."""

    def __init__(self, message: str, action_type: str = None):
        self.action_type = action_type
        super().__init__(message)


class ReducerError(TransitionError):
    """Raised when a reducer transition raises during a fold."""

    def __init__(self, slice_key: str, action_type: str):
        self.slice_key = slice_key
        super().__init__(
            f"Reducer for slice '{slice_key}' failed on action '{action_type}'",
            action_type=action_type,
        )


class SelectorError(TransitionError):
    """Raised when a selector projection raises."""

    def __init__(self, selector_name: str):
        self.selector_name = selector_name
        super().__init__(f"Selector projection '{selector_name}' failed")


class DispatchLoopError(TinyFluxError):
    """Raised when synchronous dispatches nest deeper than the configured limit."""

    def __init__(self, action_type: str, depth: int):
        self.action_type = action_type
        self.depth = depth
        super().__init__(
            f"Dispatch of '{action_type}' nested {depth} levels deep. "
            "Possible effect feedback loop."
        )
