"""KMZ Photo Extractor.

Extracts photos embedded in or referenced by the placemarks of a KMZ
archive and re-packages them into a single zip, naming each photo after
the placemark it belongs to.
"""

__version__ = "0.1.0"
