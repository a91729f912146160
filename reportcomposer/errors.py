from __future__ import annotations


class ReportContractError(ValueError):
    """Raised when a Document breaks an input invariant; nothing is composed."""

    def __init__(self, message: str, *, block_index: int | None = None):
        self.block_index = block_index
        if block_index is not None:
            message = f'block {block_index}: {message}'
        super().__init__(message)


class ImageAcquisitionError(RuntimeError):
    """Image bytes could not be fetched or decoded."""
