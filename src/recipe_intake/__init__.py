"""
Recipe Intake - turn links, text and photos into structured recipes.

Stages:
- Detection: classify raw input (url, text, image, video)
- Extraction: structured data, captions, HTML heuristics, reader proxy, OCR
- Parsing: draft recipe from raw text
- Recovery: cross-check ingredients against instructions
"""

__version__ = "0.3.0"
