class GridConfigError(ValueError):
    """The grid was set up with an invalid configuration.

    These are programmer errors; they are raised while the grid is being
    built, never while a render model is being computed.
    """


class DuplicateColumnError(GridConfigError):
    """Two columns share the same identifier.

    Attributes:
        column_id: The identifier that was found more than once.
    """

    def __init__(self, column_id: str):
        super().__init__(f"Duplicate column id: {column_id}")
        self.column_id = column_id
