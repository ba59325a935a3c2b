"""Display-independent terminal grid with scrollback, reflow, selection, keyboard selection, URL detection, box-drawing geometry and small protocol helpers."""

__version__ = "0.9.2"