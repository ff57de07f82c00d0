"""
Error taxonomy for the capture and browsing layers.
Every error carries a message that can be shown to the user as is.
"""


class NeuraNoteError(Exception):
    """Base class for recoverable client errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NeuraNoteError):
    """Input rejected locally (bad file type, oversized batch)"""


class FolderResolutionError(NeuraNoteError):
    """Destination folder could not be listed or created"""


class SubmissionError(NeuraNoteError):
    """Analysis request rejected by the backend or timed out"""


class DeleteError(NeuraNoteError):
    """A single delete failed on the backend"""

    def __init__(self, message: str, item_id: int):
        super().__init__(message)
        self.item_id = item_id


class FetchError(NeuraNoteError):
    """Folder or note listing failed"""
