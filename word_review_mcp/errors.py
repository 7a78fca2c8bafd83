"""Errors raised by the review scheduler."""


class NotFoundError(ValueError):
    """The (user, word) pair has no review state.

    Raised for missing words and for words owned by another user alike, so
    callers cannot probe for foreign ids. Surface it as a 404-class failure.
    """

    def __init__(self, user_id: str, word_id: str):
        self.user_id = user_id
        self.word_id = word_id
        super().__init__(f"Word '{word_id}' not found for user '{user_id}'")
