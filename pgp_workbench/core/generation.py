class Generation:
    """
    Monotonic counter identifying the current lifetime of a workflow's data.

    A token taken before a long-running call is compared after it: if the
    workflow was wiped in between, the generation has moved on and the result
    belongs to nobody.

    Example:
        ```python
        generation = Generation()

        token = generation.token()
        result = await long_running_call()

        if not generation.is_current(token):
            # Discard result
            ...
        ```
    """

    def __init__(self) -> None:
        self._value = 0

    def token(self) -> int:
        """Return the current generation."""
        return self._value

    def advance(self) -> int:
        """Invalidate all outstanding tokens and return the new generation."""
        self._value += 1
        return self._value

    def is_current(self, token: int) -> bool:
        return token == self._value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._value})"
