"""Update detection over image refresh output.

``docker compose pull`` exits 0 whether or not anything new was fetched, so
the only signal is the text it prints. The recognized phrases are held as
data on the detector rather than in the orchestration code, so a change in
the tool's wording only needs a new marker list.

Examples:
    >>> detector = UpdateDetector()
    >>> detector.detect(" web Pulled")
    True
    >>> detector.detect("Image is up to date for nginx:latest")
    False
"""

from collections.abc import Iterable

from stackrefresh.deployment.settings import DEFAULT_UPDATE_MARKERS


class UpdateDetector:
    """Case-sensitive substring match against known "new image" markers."""

    def __init__(self, markers: Iterable[str] = DEFAULT_UPDATE_MARKERS):
        self.markers = tuple(marker for marker in markers if marker)
        if not self.markers:
            raise ValueError("UpdateDetector needs at least one non-empty marker")

    def detect(self, pull_output: str | None) -> bool:
        """Return True if the output shows at least one freshly fetched image.

        Never raises; empty or non-text output counts as no update.
        """
        if not pull_output or not isinstance(pull_output, str):
            return False
        return any(marker in pull_output for marker in self.markers)

    __call__ = detect

    def __repr__(self) -> str:
        return f"UpdateDetector(markers={list(self.markers)!r})"
