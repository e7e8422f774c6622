"""Generator service singleton for the API."""

from txn_pipeline.service import GeneratorService

_service: GeneratorService | None = None


def get_service() -> GeneratorService:
    """Get or create the generator service singleton.

    Returns:
        GeneratorService instance.
    """
    global _service
    if _service is None:
        _service = GeneratorService()
    return _service


def set_service(service: GeneratorService | None) -> None:
    """Replace the singleton (used by tests and embedding applications)."""
    global _service
    _service = service
