"""
Rendering of registration metadata (XML, text).
"""

from .xml_metadata import metadata_to_xml, XML_DECLARATION
from .reports import metadata_to_text

__all__ = [
    'metadata_to_xml',
    'metadata_to_text',
    'XML_DECLARATION',
]
