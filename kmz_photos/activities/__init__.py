"""Extraction stages.

- extract_references: find image references in placemark markup
- scan_placemarks: parse KML and collect named placemarks
- resolve_images: turn references into output images
"""
