"""AutoZoner - snap dragged and newly opened windows into predefined zones"""

__version__ = '0.1.0'
