"""Invoice-layer errors."""


class InvoiceError(Exception):
    """Base class for invoice errors."""


class LineItemIndexError(InvoiceError, IndexError):
    """A line item index outside the current rows."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Line item index {index} out of range (0..{size - 1})")
        self.index = index
        self.size = size


class NoValidItemsError(InvoiceError, ValueError):
    """No row has both a description and a positive quantity."""

    def __init__(self) -> None:
        super().__init__("Add at least one item")
