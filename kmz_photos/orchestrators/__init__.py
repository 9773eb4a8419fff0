"""Run orchestration.

Exposes ``extract_photos``, the end-to-end KMZ photo extraction run.
"""

from kmz_photos.orchestrators.extraction import extract_photos

__all__ = ["extract_photos"]
