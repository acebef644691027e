from .data_positions import allocate_layout, resolve

__all__ = ["allocate_layout", "resolve"]
