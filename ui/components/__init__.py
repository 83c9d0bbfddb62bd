"""
UI components package for the endpoint catalog.
"""

from .endpoint_tree_panel import EndpointTreePanel

__all__ = ['EndpointTreePanel']
